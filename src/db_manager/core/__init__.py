"""Core business logic modules."""

from .config import AppConfig, ConfigManager, DatabaseConfig
from .containers import ContainerService
from .errors import ContainerRuntimeError, NameConflictError, ProvisioningError
from .events import Building, Done, Error, Pulling, ProvisioningEvent, is_terminal
from .models import ContainerSpec, ContainerState, PullProgress, RuntimeContainer
from .provisioning import ProvisioningOrchestrator, ProvisioningRun, ProvisioningState
from .runtime import RuntimeClient

__all__ = [
    "AppConfig",
    "ConfigManager",
    "DatabaseConfig",
    "ContainerService",
    "ContainerRuntimeError",
    "NameConflictError",
    "ProvisioningError",
    "Building",
    "Done",
    "Error",
    "Pulling",
    "ProvisioningEvent",
    "is_terminal",
    "ContainerSpec",
    "ContainerState",
    "PullProgress",
    "RuntimeContainer",
    "ProvisioningOrchestrator",
    "ProvisioningRun",
    "ProvisioningState",
    "RuntimeClient",
]
