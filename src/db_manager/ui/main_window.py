"""
Main application window.
"""

import logging
from typing import Optional

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QSplitter, QMessageBox,
    QFrame, QPushButton, QScrollArea, QStackedWidget, QLabel
)
from PySide6.QtCore import Qt, Slot, QTimer
from PySide6.QtGui import QCloseEvent, QPixmap

from db_manager.core.config import ConfigManager
from db_manager.core.containers import ContainerService
from db_manager.core.events import Building, Done, Error, Pulling
from db_manager.core.icons import IconLoader
from db_manager.core.models import RuntimeContainer
from db_manager.core.provisioning import ProvisioningOrchestrator
from db_manager.core.runtime import RuntimeClient
from db_manager.core.workers import (
    ContainerActionWorker, ContainerListWorker, ContainerPoller,
    IconLoadWorker, ProvisionWorker
)
from db_manager.ui.widgets.add_container import AddContainerForm, ButtonState
from db_manager.ui.widgets.container_card import ContainerCard, ContainerDetails, load_icon
from db_manager.ui.widgets.provision_log import ProvisionLog
from db_manager.utils.signals import (
    AppSignals, CancelCreate, CreateContainer, RefreshContainers, ShowCreateContainer,
    ShowError, StartContainer, StopContainer, ViewContainer, leaves_create_view
)

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    Main application window for DB Manager.

    Container cards on the left; the add-container form or a container's
    details on the right.
    """

    def __init__(self, runtime: RuntimeClient, config_manager: ConfigManager):
        super().__init__()

        # Core components, sharing the one runtime client
        self.runtime = runtime
        self.config_manager = config_manager
        self.container_service = ContainerService(runtime)
        self.orchestrator = ProvisioningOrchestrator(runtime)
        self.icon_loader = IconLoader()
        self.signals = AppSignals(self)

        self.containers: list[RuntimeContainer] = []
        self.icons: dict[str, bytes] = {}
        self._cards: dict[str, ContainerCard] = {}
        # Containers with a start/stop request in flight
        self._busy: set[str] = set()

        # Background workers
        self._workers: list = []
        self._provision_worker: Optional[ProvisionWorker] = None
        self._poller: Optional[ContainerPoller] = None

        self._setup_ui()
        self._connect_signals()
        self._start_polling()

        QTimer.singleShot(100, lambda: self.signals.send(RefreshContainers()))
        self._load_icons()

    def _setup_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle("DB Manager")
        self.setMinimumSize(800, 600)
        self.resize(1100, 750)

        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(15, 15, 15, 15)

        splitter = QSplitter(Qt.Horizontal)

        # Container list on the left
        list_frame = QFrame()
        list_frame.setFrameShape(QFrame.StyledPanel)
        list_layout = QVBoxLayout(list_frame)

        self.cards_widget = QWidget()
        self.cards_layout = QVBoxLayout(self.cards_widget)
        self.cards_layout.setSpacing(10)
        self.cards_layout.addStretch()

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.cards_widget)
        list_layout.addWidget(scroll, stretch=1)

        self.add_btn = QPushButton("Add container")
        self.add_btn.setMinimumHeight(35)
        list_layout.addWidget(self.add_btn)

        splitter.addWidget(list_frame)

        # Main view on the right
        main_frame = QFrame()
        main_frame.setFrameShape(QFrame.StyledPanel)
        main_view_layout = QVBoxLayout(main_frame)

        self.main_view = QStackedWidget()
        self.empty_view = QLabel("Select a container or add a new one")
        self.empty_view.setAlignment(Qt.AlignCenter)
        self.empty_view.setStyleSheet("color: #6b7280;")
        self.main_view.addWidget(self.empty_view)

        self.create_view = QWidget()
        create_layout = QVBoxLayout(self.create_view)
        self.add_form = AddContainerForm(self.config_manager.config.databases, self.signals)
        create_layout.addWidget(self.add_form)
        self.provision_log = ProvisionLog()
        create_layout.addWidget(self.provision_log, stretch=1)
        self.main_view.addWidget(self.create_view)

        self.details_view: Optional[ContainerDetails] = None

        main_view_layout.addWidget(self.main_view)
        splitter.addWidget(main_frame)
        splitter.setSizes([400, 700])

        main_layout.addWidget(splitter)

    def _connect_signals(self):
        """Connect signals between components."""
        self.signals.dispatch.connect(self._on_message)
        self.add_btn.clicked.connect(lambda: self.signals.send(ShowCreateContainer()))

    # =========================================================================
    # Message Handling
    # =========================================================================

    @Slot(object)
    def _on_message(self, message):
        """Handle a message sent by any widget."""
        # Leaving the form abandons the run in progress
        if self._provision_worker is not None and leaves_create_view(message):
            self._cancel_provisioning()

        if isinstance(message, RefreshContainers):
            self._refresh_containers()
        elif isinstance(message, StartContainer):
            self._run_action("start", message.container_id)
        elif isinstance(message, StopContainer):
            self._run_action("stop", message.container_id)
        elif isinstance(message, ViewContainer):
            self._show_details(message.container_id)
        elif isinstance(message, ShowCreateContainer):
            self.main_view.setCurrentWidget(self.create_view)
        elif isinstance(message, CreateContainer):
            self._start_provisioning(message)
        elif isinstance(message, CancelCreate):
            self._cancel_provisioning()
        elif isinstance(message, ShowError):
            QMessageBox.critical(self, "Error", message.message)
        else:
            logger.warning("Unhandled message %r", message)

    def _track(self, worker):
        """Keep a worker alive until it finishes."""
        self._workers.append(worker)
        worker.finished.connect(lambda: self._workers.remove(worker))
        worker.start()

    # =========================================================================
    # Container List
    # =========================================================================

    def _start_polling(self):
        self._poller = ContainerPoller(
            self.container_service,
            interval_ms=self.config_manager.config.refresh_interval_ms
        )
        self._poller.containers_loaded.connect(self._on_containers_loaded)
        self._poller.start()

    def _stop_polling(self):
        if self._poller:
            self._poller.stop()
            self._poller.wait(3000)
            self._poller = None

    def _refresh_containers(self):
        worker = ContainerListWorker(self.container_service)
        worker.containers_loaded.connect(self._on_containers_loaded)
        worker.error.connect(lambda msg: self.signals.send(ShowError(msg)))
        self._track(worker)

    @Slot(list)
    def _on_containers_loaded(self, containers: list):
        if containers == self.containers:
            return
        self.containers = containers
        self._rebuild_cards()

    def _rebuild_cards(self):
        while self.cards_layout.count() > 1:
            item = self.cards_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

        self._cards = {}
        for index, container in enumerate(self.containers):
            card = ContainerCard(container, self._icon_for(container), self.signals)
            card.set_busy(container.id in self._busy)
            self.cards_layout.insertWidget(index, card)
            self._cards[container.id] = card

    def _set_busy(self, container_id: str, busy: bool):
        if busy:
            self._busy.add(container_id)
        else:
            self._busy.discard(container_id)
        card = self._cards.get(container_id)
        if card is not None:
            card.set_busy(busy)

    def _icon_for(self, container: RuntimeContainer) -> QPixmap:
        return load_icon(self.icons.get(container.repository))

    def _load_icons(self):
        worker = IconLoadWorker(self.icon_loader, self.config_manager.config.databases)
        worker.icons_loaded.connect(self._on_icons_loaded)
        self._track(worker)

    @Slot(dict)
    def _on_icons_loaded(self, icons: dict):
        self.icons = icons
        self._rebuild_cards()

    def _run_action(self, action: str, container_id: str):
        if container_id in self._busy:
            return

        worker = ContainerActionWorker(self.container_service, action, container_id)
        worker.succeeded.connect(lambda _: self.signals.send(RefreshContainers()))
        worker.error.connect(lambda msg: self.signals.send(ShowError(msg)))
        worker.finished.connect(lambda: self._set_busy(container_id, False))
        self._set_busy(container_id, True)
        self._track(worker)

    def _show_details(self, container_id: str):
        container = next((c for c in self.containers if c.id == container_id), None)
        if container is None:
            self.main_view.setCurrentWidget(self.empty_view)
            return

        if self.details_view is not None:
            self.main_view.removeWidget(self.details_view)
            self.details_view.deleteLater()

        self.details_view = ContainerDetails(container, self._icon_for(container))
        self.main_view.addWidget(self.details_view)
        self.main_view.setCurrentWidget(self.details_view)

    # =========================================================================
    # Provisioning
    # =========================================================================

    def _start_provisioning(self, message: CreateContainer):
        if self._provision_worker is not None:
            return

        self.provision_log.clear()
        self.add_form.set_button_state(ButtonState.PULLING)

        worker = ProvisionWorker(self.orchestrator, message.spec)
        worker.event_received.connect(self._on_provision_event)
        worker.completed.connect(self._on_provision_completed)
        worker.finished.connect(self._on_provision_worker_finished)
        self._provision_worker = worker
        worker.start()

    @Slot(object)
    def _on_provision_event(self, event):
        self.provision_log.show_event(event)
        if isinstance(event, Pulling):
            self.add_form.set_button_state(ButtonState.PULLING)
        elif isinstance(event, Building):
            self.add_form.set_button_state(ButtonState.CREATING)

    @Slot(object)
    def _on_provision_completed(self, event):
        if isinstance(event, Done):
            self.signals.send(RefreshContainers())
        elif isinstance(event, Error):
            self.signals.send(ShowError(event.message))

    @Slot()
    def _on_provision_worker_finished(self):
        self._provision_worker = None
        self.add_form.set_button_state(ButtonState.READY)

    def _cancel_provisioning(self):
        if self._provision_worker is not None:
            self._provision_worker.stop()
            self.provision_log.append_line("Cancelled", 'error')

    def closeEvent(self, event: QCloseEvent):
        """Handle application close."""
        if self._provision_worker is not None:
            self._provision_worker.stop()
            self._provision_worker.wait(3000)

        self._stop_polling()
        for worker in list(self._workers):
            worker.wait(3000)

        self.icon_loader.close()
        self.runtime.close()
        event.accept()
