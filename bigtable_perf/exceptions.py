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
#
from __future__ import annotations

import enum

from google.api_core import exceptions as core_exceptions


class ValidationError(ValueError):
    """
    Raised when a benchmark is configured with values that cannot produce a
    meaningful run. Always raised before any backend call is made.
    """

    pass


class ErrorKind(enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    UNAVAILABLE = "UNAVAILABLE"
    UNKNOWN = "UNKNOWN"


_API_ERROR_KINDS = (
    (core_exceptions.NotFound, ErrorKind.NOT_FOUND),
    (core_exceptions.AlreadyExists, ErrorKind.ALREADY_EXISTS),
    (core_exceptions.PermissionDenied, ErrorKind.PERMISSION_DENIED),
    (core_exceptions.DeadlineExceeded, ErrorKind.DEADLINE_EXCEEDED),
    (core_exceptions.ServiceUnavailable, ErrorKind.UNAVAILABLE),
    (core_exceptions.RetryError, ErrorKind.DEADLINE_EXCEEDED),
)


class BackendError(Exception):
    """
    Error raised by a StorageBackend.

    Callers decide how to react by inspecting ``kind``, never the message.
    """

    def __init__(self, kind: ErrorKind, message: str = ""):
        self.kind = kind
        self.message = message
        super().__init__(f"{kind.value}: {message}" if message else kind.value)

    @classmethod
    def from_api_error(
        cls, exc: core_exceptions.GoogleAPICallError | core_exceptions.RetryError
    ) -> "BackendError":
        """
        Translate a google.api_core exception into a BackendError.

        Args:
          - exc: the exception raised by the client library
        Returns:
          - BackendError with the matching ErrorKind, chained to exc
        """
        kind = ErrorKind.UNKNOWN
        for exc_type, candidate in _API_ERROR_KINDS:
            if isinstance(exc, exc_type):
                kind = candidate
                break
        new_exc = cls(kind, getattr(exc, "message", str(exc)))
        new_exc.__cause__ = exc
        return new_exc
