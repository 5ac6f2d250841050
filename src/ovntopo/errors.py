"""Exception hierarchy for ovntopo."""

from typing import Optional


class OvnTopoError(Exception):
    """Base class for all ovntopo errors."""


class ResourceStoreError(OvnTopoError):
    """A fetch or mutation against the resource API failed."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class VpcNotFound(OvnTopoError):
    """The requested VPC is not present in the fetched snapshot."""

    def __init__(self, name: str):
        super().__init__(f'VPC "{name}" not found')
        self.name = name


class UnknownResourceKind(OvnTopoError):
    """No field schema is registered for a resource kind."""

    def __init__(self, kind: str):
        super().__init__(f"Configuration not found for resource type: {kind}")
        self.kind = kind


class TopologyIntegrityError(OvnTopoError):
    """A built graph has duplicate ids or dangling edges."""
