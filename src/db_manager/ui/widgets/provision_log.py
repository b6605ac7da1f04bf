"""
Provisioning log widget showing pull progress and run messages.
"""

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton,
    QPlainTextEdit, QLabel, QProgressBar
)
from PySide6.QtCore import Slot
from PySide6.QtGui import QFont, QTextCursor, QColor, QTextCharFormat

from db_manager.core.events import Building, Done, Error, Pulling


class ProvisionLog(QWidget):
    """
    Widget displaying the events of the current provisioning run.

    Features:
    - Overall pull progress bar
    - One line per phase change, per finished layer and for the outcome
    """

    # Maximum number of log lines to keep
    MAX_LINES = 2000

    COLORS = {
        'error': '#f87171',
        'success': '#22c55e',
        'info': '#60a5fa',
        'default': '#d4d4d4',
    }

    def __init__(self, parent=None):
        super().__init__(parent)
        self._completed_layers: set[str] = set()
        self._pulling = False
        self._setup_ui()
        self._connect_signals()

    def _setup_ui(self):
        """Initialize the user interface."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(5)

        # Header with controls
        header = QHBoxLayout()

        title = QLabel("Provisioning")
        title.setFont(QFont("", -1, QFont.Bold))
        header.addWidget(title)

        header.addStretch()

        self.clear_btn = QPushButton("Clear")
        self.clear_btn.setFixedWidth(70)
        header.addWidget(self.clear_btn)

        layout.addLayout(header)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        layout.addWidget(self.progress_bar)

        self.log_display = QPlainTextEdit()
        self.log_display.setReadOnly(True)
        self.log_display.setFont(QFont("Monospace", 9))
        self.log_display.setMaximumBlockCount(self.MAX_LINES)
        self.log_display.setStyleSheet("""
            QPlainTextEdit {
                background-color: #1e1e1e;
                color: #d4d4d4;
                border: 1px solid #3c3c3c;
                border-radius: 4px;
            }
        """)
        layout.addWidget(self.log_display)

        self.status_label = QLabel("Idle")
        self.status_label.setStyleSheet("color: #6b7280;")
        layout.addWidget(self.status_label)

    def _connect_signals(self):
        """Connect widget signals."""
        self.clear_btn.clicked.connect(self.clear)

    def append_line(self, line: str, level: str = 'default'):
        """Append a colored line and keep the view scrolled to the bottom."""
        cursor = self.log_display.textCursor()
        cursor.movePosition(QTextCursor.End)

        text_format = QTextCharFormat()
        text_format.setForeground(QColor(self.COLORS.get(level, self.COLORS['default'])))
        cursor.insertText(line + '\n', text_format)

        self.log_display.verticalScrollBar().setValue(
            self.log_display.verticalScrollBar().maximum()
        )

    @Slot(object)
    def show_event(self, event):
        """Render one provisioning event."""
        if isinstance(event, Pulling):
            if not self._pulling:
                self._pulling = True
                self.append_line("Pulling image...", 'info')
                self.status_label.setText("Pulling")
            for layer, fraction in event.layers:
                if fraction >= 1.0 and layer not in self._completed_layers:
                    self._completed_layers.add(layer)
                    self.append_line(f"  {layer}: done")
            self.progress_bar.setValue(int(event.overall * 100))
        elif isinstance(event, Building):
            self.progress_bar.setValue(100)
            self.append_line("Creating volumes and container...", 'info')
            self.status_label.setText("Creating")
        elif isinstance(event, Done):
            self.append_line(f"Container started ({event.container_id[:12]})", 'success')
            self.status_label.setText("Done")
        elif isinstance(event, Error):
            self.append_line(f"Error: {event.message}", 'error')
            self.status_label.setText("Failed")

    @Slot()
    def clear(self):
        """Reset for a new run."""
        self.log_display.clear()
        self.progress_bar.setValue(0)
        self._completed_layers = set()
        self._pulling = False
        self.status_label.setText("Idle")
