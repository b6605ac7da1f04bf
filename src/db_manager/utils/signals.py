"""
Application messages and the signal hub that dispatches them.

Widgets never hold callbacks into application state. They emit plain
message values through ``AppSignals.dispatch`` and the main window decides
what to do with each one.
"""

from dataclasses import dataclass

from PySide6.QtCore import QObject, Signal

from db_manager.core.models import ContainerSpec


@dataclass(frozen=True)
class RefreshContainers:
    """Reload the container list."""


@dataclass(frozen=True)
class StartContainer:
    container_id: str


@dataclass(frozen=True)
class StopContainer:
    container_id: str


@dataclass(frozen=True)
class ViewContainer:
    container_id: str


@dataclass(frozen=True)
class ShowCreateContainer:
    """Open the add-container form."""


@dataclass(frozen=True)
class CreateContainer:
    spec: ContainerSpec


@dataclass(frozen=True)
class CancelCreate:
    """Abandon the provisioning run in progress."""


@dataclass(frozen=True)
class ShowError:
    message: str


class AppSignals(QObject):
    """
    Central signal hub for application-wide messages.

    One instance is created by the main window and handed to every widget
    that needs to send messages.
    """

    dispatch = Signal(object)  # One of the message dataclasses above

    def send(self, message) -> None:
        """Dispatch a message to the handler."""
        self.dispatch.emit(message)


# Messages that take the main view away from the add-container form
_LEAVES_CREATE_VIEW = (ViewContainer,)


def leaves_create_view(message) -> bool:
    """Whether handling ``message`` navigates away from the add-container form."""
    return isinstance(message, _LEAVES_CREATE_VIEW)
