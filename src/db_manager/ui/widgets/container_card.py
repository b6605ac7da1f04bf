"""
Container card and detail widgets.
"""

from typing import Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame, QPushButton,
    QGroupBox, QFormLayout
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QFont, QPixmap

from db_manager.core.models import ContainerState, RuntimeContainer
from db_manager.utils.signals import AppSignals, StartContainer, StopContainer, ViewContainer

ICON_SIZE = 35


def load_icon(data: Optional[bytes]) -> QPixmap:
    """Build a pixmap from downloaded icon bytes; empty if they don't decode."""
    pixmap = QPixmap()
    if data:
        pixmap.loadFromData(data)
    if pixmap.isNull():
        return pixmap
    return pixmap.scaled(ICON_SIZE, ICON_SIZE, Qt.KeepAspectRatio, Qt.SmoothTransformation)


class StatusIndicator(QFrame):
    """A colored dot indicator for status display."""

    COLORS = {
        'green': '#22c55e',
        'yellow': '#eab308',
        'red': '#ef4444',
        'gray': '#6b7280',
    }

    STATE_COLORS = {
        ContainerState.RUNNING: 'green',
        ContainerState.PAUSED: 'yellow',
        ContainerState.RESTARTING: 'yellow',
        ContainerState.REMOVING: 'yellow',
        ContainerState.DEAD: 'red',
    }

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFixedSize(12, 12)
        self._set_color('gray')

    def _set_color(self, color: str):
        """Set the indicator color."""
        hex_color = self.COLORS.get(color, self.COLORS['gray'])
        self.setStyleSheet(f"""
            QFrame {{
                background-color: {hex_color};
                border-radius: 6px;
            }}
        """)

    def set_state(self, state: ContainerState):
        self._set_color(self.STATE_COLORS.get(state, 'gray'))


class ContainerCard(QFrame):
    """
    Summary of one managed container with Start/Stop/View buttons.

    Button presses are sent as messages through the shared AppSignals hub.
    """

    def __init__(
        self,
        container: RuntimeContainer,
        icon: QPixmap,
        signals: AppSignals,
        parent=None
    ):
        super().__init__(parent)
        self.container = container
        self.signals = signals
        self.setFrameShape(QFrame.StyledPanel)
        self._setup_ui(icon)

    def _setup_ui(self, icon: QPixmap):
        """Initialize the user interface."""
        layout = QVBoxLayout(self)
        layout.setSpacing(6)

        # Title row
        title_row = QHBoxLayout()

        self.icon_label = QLabel()
        self.icon_label.setFixedSize(ICON_SIZE, ICON_SIZE)
        if not icon.isNull():
            self.icon_label.setPixmap(icon)
        title_row.addWidget(self.icon_label)

        name_label = QLabel(self.container.display_name)
        name_label.setFont(QFont("", 13, QFont.Bold))
        title_row.addWidget(name_label)

        title_row.addStretch()

        self.indicator = StatusIndicator()
        self.indicator.set_state(self.container.lifecycle_state)
        title_row.addWidget(self.indicator)

        state_label = QLabel(self.container.state.capitalize())
        state_label.setStyleSheet("color: #6b7280;")
        title_row.addWidget(state_label)

        layout.addLayout(title_row)

        image_label = QLabel(self.container.image)
        image_label.setStyleSheet("color: #6b7280; font-size: 11px;")
        layout.addWidget(image_label)

        # Buttons
        buttons = QHBoxLayout()

        self.start_btn = QPushButton("Start")
        self.stop_btn = QPushButton("Stop")
        self.view_btn = QPushButton("View")

        running = self.container.is_running
        self.start_btn.setEnabled(not running)
        self.stop_btn.setEnabled(running)

        buttons.addWidget(self.start_btn)
        buttons.addWidget(self.stop_btn)
        buttons.addWidget(self.view_btn)
        layout.addLayout(buttons)

        container_id = self.container.id
        self.start_btn.clicked.connect(lambda: self.signals.send(StartContainer(container_id)))
        self.stop_btn.clicked.connect(lambda: self.signals.send(StopContainer(container_id)))
        self.view_btn.clicked.connect(lambda: self.signals.send(ViewContainer(container_id)))

    def set_busy(self, busy: bool):
        """Disable buttons while a start/stop request is in flight."""
        running = self.container.is_running
        self.start_btn.setEnabled(not busy and not running)
        self.stop_btn.setEnabled(not busy and running)


class ContainerDetails(QWidget):
    """Read-only view of a container's environment and volumes."""

    def __init__(self, container: RuntimeContainer, icon: QPixmap, parent=None):
        super().__init__(parent)
        self.container = container
        self._setup_ui(icon)

    def _setup_ui(self, icon: QPixmap):
        layout = QVBoxLayout(self)
        layout.setSpacing(15)

        header = QHBoxLayout()
        icon_label = QLabel()
        if not icon.isNull():
            icon_label.setPixmap(icon)
        header.addWidget(icon_label)

        title = QLabel(self.container.display_name)
        title.setFont(QFont("", 18, QFont.Bold))
        header.addWidget(title)
        header.addStretch()
        layout.addLayout(header)

        info_group = QGroupBox("Container")
        info_layout = QFormLayout(info_group)
        info_layout.addRow("ID:", QLabel(self.container.short_id))
        info_layout.addRow("Image:", QLabel(self.container.image))
        info_layout.addRow("State:", QLabel(self.container.state))
        layout.addWidget(info_group)

        env_group = QGroupBox("Environment")
        env_layout = QFormLayout(env_group)
        for key, value in sorted(self.container.variables.items()):
            value_label = QLabel(value)
            value_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
            env_layout.addRow(f"{key}:", value_label)
        layout.addWidget(env_group)

        volume_group = QGroupBox("Volumes")
        volume_layout = QFormLayout(volume_group)
        for name, destination in sorted(self.container.volumes.items()):
            volume_layout.addRow(f"{name}:", QLabel(destination))
        layout.addWidget(volume_group)

        layout.addStretch()
