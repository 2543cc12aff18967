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

"""Instance and cluster administration helpers for benchmark setup."""

import logging

from google.cloud.bigtable import Client

LOGGER = logging.getLogger(__name__)

DEFAULT_SERVE_NODES = 3


def project_name(project_id):
    return f"projects/{project_id}"


def instance_name(project_id, instance_id):
    return f"{project_name(project_id)}/instances/{instance_id}"


def location_name(project_id, location_id):
    return f"{project_name(project_id)}/locations/{location_id}"


def cluster_name(project_id, instance_id, cluster_id):
    return f"{instance_name(project_id, instance_id)}/clusters/{cluster_id}"


def table_name(project_id, instance_id, table_id):
    return f"{instance_name(project_id, instance_id)}/tables/{table_id}"


class InstanceAdmin(object):
    """Manage the instances and clusters of one project.

    Errors raised by the client library propagate unchanged.

    :type client: :class:`~google.cloud.bigtable.client.Client`
    :param client: A client created with ``admin=True``.
    """

    def __init__(self, client):
        self._client = client

    @classmethod
    def from_project(cls, project_id):
        return cls(Client(project=project_id, admin=True))

    @property
    def project(self):
        return self._client.project

    def instance_name(self, instance_id):
        return instance_name(self.project, instance_id)

    def cluster_name(self, instance_id, cluster_id):
        return cluster_name(self.project, instance_id, cluster_id)

    def location_name(self, location_id):
        return location_name(self.project, location_id)

    def create_instance(
        self,
        instance_id,
        location_id,
        cluster_id,
        serve_nodes=DEFAULT_SERVE_NODES,
        display_name=None,
        instance_type=None,
        labels=None,
    ):
        """Create an instance with a single cluster.

        :type instance_id: str
        :param instance_id: The ID of the new instance.

        :type location_id: str
        :param location_id: The zone of the cluster, e.g. ``us-central1-b``.

        :type cluster_id: str
        :param cluster_id: The ID of the instance's first cluster.

        :type serve_nodes: int
        :param serve_nodes: (Optional) Number of nodes in the cluster.

        :rtype: :class:`~google.api_core.operation.Operation`
        :returns: The long-running create operation.
        """
        instance = self._client.instance(
            instance_id,
            display_name=display_name,
            instance_type=instance_type,
            labels=labels,
        )
        cluster = instance.cluster(
            cluster_id, location_id=location_id, serve_nodes=serve_nodes
        )
        LOGGER.info("Creating instance %s", self.instance_name(instance_id))
        return instance.create(clusters=[cluster])

    def get_instance(self, instance_id):
        instance = self._client.instance(instance_id)
        instance.reload()
        return instance

    def update_instance(
        self, instance_id, display_name=None, instance_type=None, labels=None
    ):
        """Update the display name, type or labels of an instance.

        Fields left as ``None`` keep their current value.

        :rtype: :class:`~google.api_core.operation.Operation`
        :returns: The long-running update operation.
        """
        instance = self.get_instance(instance_id)
        if display_name is not None:
            instance.display_name = display_name
        if instance_type is not None:
            instance.type_ = instance_type
        if labels is not None:
            instance.labels = labels
        return instance.update()

    def list_instances(self):
        instances, failed_locations = self._client.list_instances()
        if failed_locations:
            LOGGER.warning("Could not list instances in %s", failed_locations)
        return instances

    def delete_instance(self, instance_id):
        LOGGER.info("Deleting instance %s", self.instance_name(instance_id))
        self._client.instance(instance_id).delete()

    def create_cluster(
        self, instance_id, cluster_id, location_id, serve_nodes=DEFAULT_SERVE_NODES
    ):
        cluster = self._client.instance(instance_id).cluster(
            cluster_id, location_id=location_id, serve_nodes=serve_nodes
        )
        return cluster.create()

    def get_cluster(self, instance_id, cluster_id):
        cluster = self._client.instance(instance_id).cluster(cluster_id)
        cluster.reload()
        return cluster

    def list_clusters(self, instance_id):
        clusters, failed_locations = self._client.instance(instance_id).list_clusters()
        if failed_locations:
            LOGGER.warning("Could not list clusters in %s", failed_locations)
        return clusters

    def update_cluster(self, instance_id, cluster_id, serve_nodes):
        """Resize a cluster.

        :rtype: :class:`~google.api_core.operation.Operation`
        :returns: The long-running update operation.
        """
        cluster = self.get_cluster(instance_id, cluster_id)
        cluster.serve_nodes = serve_nodes
        return cluster.update()

    def delete_cluster(self, instance_id, cluster_id):
        self._client.instance(instance_id).cluster(cluster_id).delete()
