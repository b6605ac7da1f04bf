"""
Errors surfaced by the provisioning pipeline.

Only two kinds ever reach a consumer: a name conflict with an existing
resource, or a failure reported by the container runtime.
"""

from typing import Optional


class ProvisioningError(Exception):
    """Base class for every failure the pipeline reports."""


class NameConflictError(ProvisioningError):
    """A container or volume with the requested name already exists."""

    def __init__(self, resource: str, kind: str = "container"):
        self.resource = resource
        self.kind = kind
        super().__init__(f"{kind.capitalize()} name conflict {resource}")


class ContainerRuntimeError(ProvisioningError):
    """The container runtime rejected or failed a call."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
