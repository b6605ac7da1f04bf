"""UI Widgets."""

from .add_container import AddContainerForm, ButtonState
from .container_card import ContainerCard, ContainerDetails, StatusIndicator
from .provision_log import ProvisionLog

__all__ = [
    "AddContainerForm",
    "ButtonState",
    "ContainerCard",
    "ContainerDetails",
    "StatusIndicator",
    "ProvisionLog",
]
