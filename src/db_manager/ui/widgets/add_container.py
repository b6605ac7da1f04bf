"""
Add-container form: pick a database, name it and fill in its variables.
"""

from enum import Enum

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QComboBox,
    QLineEdit, QGroupBox, QCheckBox, QFormLayout, QMessageBox
)
from PySide6.QtCore import Slot

from db_manager.core.config import DatabaseConfig
from db_manager.utils.signals import AppSignals, CancelCreate, CreateContainer


class ButtonState(Enum):
    """What the submit area shows."""
    READY = "ready"
    PULLING = "pulling"
    CREATING = "creating"


class AddContainerForm(QWidget):
    """
    Form for describing a new database container.

    Submitting sends a CreateContainer message; while a run is in progress
    the inputs are locked and the submit button turns into a progress badge.
    """

    def __init__(self, databases: list[DatabaseConfig], signals: AppSignals, parent=None):
        super().__init__(parent)
        self.databases = databases
        self.signals = signals
        self._variable_inputs: dict[str, QLineEdit] = {}
        self._button_state = ButtonState.READY

        self._setup_ui()
        self._connect_signals()
        self._on_database_selected(self.database_combo.currentIndex())

    def _setup_ui(self):
        """Initialize the user interface."""
        layout = QVBoxLayout(self)
        layout.setSpacing(15)

        self.database_combo = QComboBox()
        self.database_combo.setPlaceholderText("Choose image")
        for database in self.databases:
            self.database_combo.addItem(database.name)
        if self.databases:
            self.database_combo.setCurrentIndex(0)
        layout.addWidget(self.database_combo)

        # Name and tag
        name_row = QHBoxLayout()
        self.name_input = QLineEdit()
        self.name_input.setPlaceholderText("name")
        name_row.addWidget(self.name_input, stretch=1)

        self.tag_combo = QComboBox()
        name_row.addWidget(self.tag_combo)
        layout.addLayout(name_row)

        # Environment variables, rebuilt for each database
        self.variables_group = QGroupBox("Environment")
        self.variables_layout = QFormLayout(self.variables_group)
        layout.addWidget(self.variables_group)

        self.persist_checkbox = QCheckBox("Persistent container")
        self.persist_checkbox.setChecked(True)
        self.persist_checkbox.setToolTip("Create named volumes so data survives the container")
        layout.addWidget(self.persist_checkbox)

        self.volumes_group = QGroupBox("The following mounts will be created")
        self.volumes_layout = QFormLayout(self.volumes_group)
        layout.addWidget(self.volumes_group)

        # Submit area
        submit_row = QHBoxLayout()
        self.create_btn = QPushButton("Create Container")
        self.create_btn.setMinimumHeight(40)
        submit_row.addWidget(self.create_btn)

        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.setMinimumHeight(40)
        self.cancel_btn.setVisible(False)
        submit_row.addWidget(self.cancel_btn)

        layout.addLayout(submit_row)

        self.badge = QLabel("")
        self.badge.setStyleSheet(
            "background-color: #22c55e; color: white; border-radius: 8px; padding: 4px 10px;"
        )
        self.badge.setVisible(False)
        layout.addWidget(self.badge)

        layout.addStretch()

    def _connect_signals(self):
        """Connect widget signals to slots."""
        self.database_combo.currentIndexChanged.connect(self._on_database_selected)
        self.name_input.textChanged.connect(self._update_submit)
        self.persist_checkbox.toggled.connect(self.volumes_group.setVisible)
        self.create_btn.clicked.connect(self._on_create_clicked)
        self.cancel_btn.clicked.connect(lambda: self.signals.send(CancelCreate()))

    @property
    def selected_database(self):
        index = self.database_combo.currentIndex()
        if 0 <= index < len(self.databases):
            return self.databases[index]
        return None

    @Slot(int)
    def _on_database_selected(self, index: int):
        """Rebuild tag, variable and volume inputs for the chosen database."""
        database = self.selected_database

        self.tag_combo.clear()
        _clear_form(self.variables_layout)
        _clear_form(self.volumes_layout)
        self._variable_inputs = {}

        if database is not None:
            self.tag_combo.addItems(database.tags or [database.default_tag])

            for label, key in database.variables.items():
                field = QLineEdit()
                field.setPlaceholderText(key)
                self.variables_layout.addRow(label, field)
                self._variable_inputs[key] = field

            for name, path in database.volumes.items():
                path_label = QLabel(path)
                path_label.setStyleSheet("color: #969696; font-size: 11px;")
                self.volumes_layout.addRow(name, path_label)

        self.variables_group.setVisible(bool(self._variable_inputs))
        self._update_submit()

    @Slot()
    def _update_submit(self):
        ready = self._button_state == ButtonState.READY
        has_name = bool(self.name_input.text().strip())
        self.create_btn.setEnabled(ready and has_name and self.selected_database is not None)

    @Slot()
    def _on_create_clicked(self):
        database = self.selected_database
        if database is None:
            return

        try:
            spec = database.build_spec(
                name=self.name_input.text(),
                tag=self.tag_combo.currentText(),
                values={key: field.text() for key, field in self._variable_inputs.items()},
                persist=self.persist_checkbox.isChecked(),
            )
        except ValueError as e:
            QMessageBox.warning(self, "Invalid container", str(e))
            return

        self.signals.send(CreateContainer(spec))

    def set_button_state(self, state: ButtonState):
        """Lock the form while a run is in progress and show its phase."""
        self._button_state = state
        editable = state == ButtonState.READY

        for widget in (self.database_combo, self.name_input, self.tag_combo,
                       self.persist_checkbox, self.variables_group):
            widget.setEnabled(editable)

        self.create_btn.setVisible(editable)
        self.cancel_btn.setVisible(not editable)
        self.badge.setVisible(not editable)
        self.badge.setText(state.value.capitalize())
        self._update_submit()


def _clear_form(layout: QFormLayout):
    while layout.rowCount():
        layout.removeRow(0)
