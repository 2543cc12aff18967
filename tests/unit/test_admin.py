# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import mock

PROJECT = "project"
INSTANCE_ID = "instance-id"
CLUSTER_ID = "cluster-id"
LOCATION_ID = "us-central1-f"


def test_name_helpers():
    from bigtable_perf import admin

    assert admin.project_name(PROJECT) == "projects/project"
    assert admin.instance_name(PROJECT, INSTANCE_ID) == (
        "projects/project/instances/instance-id"
    )
    assert admin.location_name(PROJECT, LOCATION_ID) == (
        "projects/project/locations/us-central1-f"
    )
    assert admin.cluster_name(PROJECT, INSTANCE_ID, CLUSTER_ID) == (
        "projects/project/instances/instance-id/clusters/cluster-id"
    )
    assert admin.table_name(PROJECT, INSTANCE_ID, "t") == (
        "projects/project/instances/instance-id/tables/t"
    )


class TestInstanceAdmin:
    def _target_class(self):
        from bigtable_perf.admin import InstanceAdmin

        return InstanceAdmin

    def _make_one(self):
        client = mock.Mock(project=PROJECT)
        return self._target_class()(client), client

    def test_from_project(self):
        with mock.patch("bigtable_perf.admin.Client") as client_cls:
            admin = self._target_class().from_project(PROJECT)
        client_cls.assert_called_once_with(project=PROJECT, admin=True)
        assert admin.project is client_cls.return_value.project

    def test_names(self):
        admin, _ = self._make_one()
        assert admin.instance_name(INSTANCE_ID) == "projects/project/instances/instance-id"
        assert admin.cluster_name(INSTANCE_ID, CLUSTER_ID).endswith("/clusters/cluster-id")
        assert admin.location_name(LOCATION_ID) == (
            "projects/project/locations/us-central1-f"
        )

    def test_create_instance(self):
        admin, client = self._make_one()
        instance = client.instance.return_value
        result = admin.create_instance(
            INSTANCE_ID, LOCATION_ID, CLUSTER_ID, serve_nodes=1, labels={"k": "v"}
        )
        client.instance.assert_called_once_with(
            INSTANCE_ID, display_name=None, instance_type=None, labels={"k": "v"}
        )
        instance.cluster.assert_called_once_with(
            CLUSTER_ID, location_id=LOCATION_ID, serve_nodes=1
        )
        instance.create.assert_called_once_with(
            clusters=[instance.cluster.return_value]
        )
        assert result is instance.create.return_value

    def test_get_instance(self):
        admin, client = self._make_one()
        instance = admin.get_instance(INSTANCE_ID)
        assert instance is client.instance.return_value
        instance.reload.assert_called_once_with()

    def test_update_instance_only_given_fields(self):
        admin, client = self._make_one()
        instance = client.instance.return_value
        instance.labels = {"old": "1"}
        admin.update_instance(INSTANCE_ID, display_name="Perf")
        assert instance.display_name == "Perf"
        assert instance.labels == {"old": "1"}
        instance.update.assert_called_once_with()

    def test_list_instances(self):
        admin, client = self._make_one()
        instances = [mock.Mock(), mock.Mock()]
        client.list_instances.return_value = (instances, ["us-east1-b"])
        assert admin.list_instances() == instances

    def test_delete_instance(self):
        admin, client = self._make_one()
        admin.delete_instance(INSTANCE_ID)
        client.instance.assert_called_once_with(INSTANCE_ID)
        client.instance.return_value.delete.assert_called_once_with()

    def test_create_cluster(self):
        admin, client = self._make_one()
        admin.create_cluster(INSTANCE_ID, CLUSTER_ID, LOCATION_ID)
        instance = client.instance.return_value
        instance.cluster.assert_called_once_with(
            CLUSTER_ID, location_id=LOCATION_ID, serve_nodes=3
        )
        instance.cluster.return_value.create.assert_called_once_with()

    def test_list_clusters(self):
        admin, client = self._make_one()
        clusters = [mock.Mock()]
        client.instance.return_value.list_clusters.return_value = (clusters, [])
        assert admin.list_clusters(INSTANCE_ID) == clusters

    def test_update_cluster(self):
        admin, client = self._make_one()
        cluster = client.instance.return_value.cluster.return_value
        result = admin.update_cluster(INSTANCE_ID, CLUSTER_ID, serve_nodes=5)
        cluster.reload.assert_called_once_with()
        assert cluster.serve_nodes == 5
        assert result is cluster.update.return_value

    def test_delete_cluster(self):
        admin, client = self._make_one()
        admin.delete_cluster(INSTANCE_ID, CLUSTER_ID)
        client.instance.return_value.cluster.assert_called_once_with(CLUSTER_ID)
        client.instance.return_value.cluster.return_value.delete.assert_called_once_with()
