"""
Background workers for runtime calls.

Every call into the container runtime happens on one of these threads so the
UI never blocks; results travel back through Qt signals.
"""

import logging

from PySide6.QtCore import QThread, Signal, QMutex, QMutexLocker

from .channel import EventStream
from .containers import ContainerService
from .errors import ProvisioningError
from .events import is_terminal
from .icons import IconLoader
from .models import ContainerSpec
from .provisioning import ProvisioningOrchestrator

logger = logging.getLogger(__name__)


class ProvisionWorker(QThread):
    """
    Thread that consumes the event stream of one provisioning run.

    Stopping the worker closes the stream, which abandons the run at its next
    step. Resources already created are kept.
    """

    # Signals
    event_received = Signal(object)   # Every ProvisioningEvent, in order
    completed = Signal(object)        # The terminal Done/Error event

    def __init__(self, orchestrator: ProvisioningOrchestrator, spec: ContainerSpec, parent=None):
        super().__init__(parent)
        self.orchestrator = orchestrator
        self.spec = spec
        self._stream: EventStream = None
        self._stop_requested = False
        self._mutex = QMutex()

    def run(self):
        """Start the run and forward its events until it terminates."""
        with QMutexLocker(self._mutex):
            if self._stop_requested:
                return
            self._stream = self.orchestrator.submit(self.spec)

        for event in self._stream:
            self.event_received.emit(event)
            if is_terminal(event):
                self.completed.emit(event)

    def stop(self):
        """Abandon the run."""
        with QMutexLocker(self._mutex):
            self._stop_requested = True
            if self._stream is not None:
                self._stream.close()


class ContainerListWorker(QThread):
    """Thread that fetches the managed containers once."""

    # Signals
    containers_loaded = Signal(list)  # list[RuntimeContainer]
    error = Signal(str)

    def __init__(self, service: ContainerService, parent=None):
        super().__init__(parent)
        self.service = service

    def run(self):
        try:
            self.containers_loaded.emit(self.service.list_containers())
        except ProvisioningError as e:
            self.error.emit(f"Could not get containers: {e}")


class ContainerActionWorker(QThread):
    """Thread that starts or stops a single container."""

    # Signals
    succeeded = Signal(str)  # Container id
    error = Signal(str)

    ACTIONS = ("start", "stop")

    def __init__(self, service: ContainerService, action: str, container_id: str, parent=None):
        super().__init__(parent)
        if action not in self.ACTIONS:
            raise ValueError(f"Unknown container action: {action}")
        self.service = service
        self.action = action
        self.container_id = container_id

    def run(self):
        try:
            getattr(self.service, self.action)(self.container_id)
            self.succeeded.emit(self.container_id)
        except ProvisioningError as e:
            self.error.emit(f"Could not {self.action} docker container: {e}")


class IconLoadWorker(QThread):
    """Thread that downloads the catalog icons."""

    # Signals
    icons_loaded = Signal(dict)  # Image repository -> bytes

    def __init__(self, loader: IconLoader, databases: list, parent=None):
        super().__init__(parent)
        self.loader = loader
        self.databases = databases

    def run(self):
        self.icons_loaded.emit(self.loader.load_all(self.databases))


class ContainerPoller(QThread):
    """
    Thread that periodically refreshes the container list.

    Keeps cards in sync with changes made outside the application.
    """

    # Signals
    containers_loaded = Signal(list)

    def __init__(self, service: ContainerService, interval_ms: int = 5000, parent=None):
        super().__init__(parent)
        self.service = service
        self.interval_ms = interval_ms
        self._stop_requested = False
        self._mutex = QMutex()

    def run(self):
        """Poll at regular intervals."""
        while True:
            with QMutexLocker(self._mutex):
                if self._stop_requested:
                    break

            try:
                self.containers_loaded.emit(self.service.list_containers())
            except ProvisioningError as e:
                logger.debug("Container poll failed: %s", e)

            # Sleep in small increments to allow quick stopping
            for _ in range(self.interval_ms // 100):
                with QMutexLocker(self._mutex):
                    if self._stop_requested:
                        return
                self.msleep(100)

    def stop(self):
        """Request the polling to stop."""
        with QMutexLocker(self._mutex):
            self._stop_requested = True
