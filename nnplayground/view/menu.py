"""Menu bar: project files, data editing and network selection."""
import logging

from PyQt6.QtGui import QAction, QActionGroup, QKeySequence
from PyQt6.QtWidgets import QFileDialog, QMessageBox

from nnplayground.config import DEFAULT_TEST_FRACTION
from nnplayground.model import ENGINES, presets
from nnplayground.persistence import ProjectFileError
from nnplayground.view.data_panel import DataTool, TOOL_LABELS

logger = logging.getLogger(__name__)


class Menu:
    def __init__(self, app, window):
        self.app = app
        self.window = window
        self.tool_actions = {}
        self.engine_actions = {}

    def init(self):
        bar = self.window.menuBar()

        # --- File ---
        file_menu = bar.addMenu("&File")
        self._add(file_menu, "&New", self.new_data, QKeySequence.StandardKey.New)
        self._add(file_menu, "&Open Project...", self.open_project, QKeySequence.StandardKey.Open)
        self._add(file_menu, "&Save Project As...", self.save_project, QKeySequence.StandardKey.SaveAs)
        file_menu.addSeparator()
        self._add(file_menu, "&Import Samples...", self.import_samples)
        self._add(file_menu, "&Export Samples...", self.export_samples)
        file_menu.addSeparator()
        self._add(file_menu, "&Quit", self.window.close, QKeySequence.StandardKey.Quit)

        # --- Data ---
        data_menu = bar.addMenu("&Data")
        preset_menu = data_menu.addMenu("&Presets")
        for name in presets.PRESETS:
            self._add(preset_menu, name, lambda _, name=name: self.load_preset(name))
        data_menu.addSeparator()
        self._add(data_menu, f"&Split Test Set ({DEFAULT_TEST_FRACTION:.0%})", self.split_test_set)
        self._add(data_menu, "&Merge Test Set", self.merge_test_set)
        data_menu.addSeparator()

        tool_group = QActionGroup(self.window)
        tool_group.setExclusive(True)
        for tool in DataTool:
            action = self._add(data_menu, TOOL_LABELS[tool], lambda _, tool=tool: self.app.set_data_tool(tool),
                               str(int(tool) + 1))
            action.setCheckable(True)
            action.setChecked(tool == DataTool.POSITIVE)
            tool_group.addAction(action)
            self.tool_actions[tool] = action

        self.test_mode_action = self._add(data_menu, "Add &Test Samples", self.window.data_panel.set_test_mode, "T")
        self.test_mode_action.setCheckable(True)

        # --- Network ---
        network_menu = bar.addMenu("&Network")
        engine_menu = network_menu.addMenu("&Engine")
        engine_group = QActionGroup(self.window)
        engine_group.setExclusive(True)
        for key, (label, _) in ENGINES.items():
            action = self._add(engine_menu, label, lambda _, key=key: self.app.set_engine(key))
            action.setCheckable(True)
            engine_group.addAction(action)
            self.engine_actions[key] = action
        self._add(network_menu, "&Reset Network", self.app.reset_network, "Ctrl+R")
        self._add(network_menu, "Start / Stop &Training", self.window.control_panel.run_button.toggle, "Space")
        self.sync()

    def _add(self, menu, text, slot, shortcut=None):
        action = QAction(text, self.window)
        if shortcut is not None:
            action.setShortcut(QKeySequence(shortcut) if isinstance(shortcut, str) else shortcut)
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    def sync(self):
        """Check the menu entries matching the application state"""
        action = self.engine_actions.get(self.app.engine)
        if action is not None:
            action.setChecked(True)

    # --- Data ---

    def _data_changed(self):
        self.app.update_view(update_topology=True)

    def new_data(self):
        with self.app.get_network_lock():
            self.app.get_data().clear()
        self._data_changed()

    def load_preset(self, name):
        X, values = presets.generate(name)
        with self.app.get_network_lock():
            self.app.get_data().set_samples(X, values)
        logger.info(f"Loaded preset '{name}' with {len(X)} samples")
        self._data_changed()

    def split_test_set(self):
        with self.app.get_network_lock():
            moved = self.app.get_data().split_test_samples(DEFAULT_TEST_FRACTION)
        if not moved:
            QMessageBox.information(self.window, "Split Test Set", "Not enough training samples to split.")
        self._data_changed()

    def merge_test_set(self):
        with self.app.get_network_lock():
            self.app.get_data().merge_test_samples()
        self._data_changed()

    # --- Files ---

    def open_project(self):
        file_path, _ = QFileDialog.getOpenFileName(self.window, "Open Project", "", "Projects (*.json *.tmp);;All Files (*)")
        if not file_path:
            return
        self.app.stop_training(True)
        try:
            self.app.get_data_loader().load_from_file(file_path)
        except ProjectFileError as e:
            logger.warning(str(e))
            QMessageBox.critical(self.window, "Error", str(e))
            return
        self.app.update_view(True, True, True)

    def save_project(self):
        file_path, _ = QFileDialog.getSaveFileName(self.window, "Save Project", "", "Projects (*.json)")
        if not file_path:
            return
        try:
            self.app.get_data_loader().save_to_file(file_path)
        except ProjectFileError as e:
            logger.warning(str(e))
            QMessageBox.critical(self.window, "Error", str(e))

    def import_samples(self):
        file_path, _ = QFileDialog.getOpenFileName(self.window, "Import Samples", "", "NumPy Data Files (*.npz)")
        if not file_path:
            return
        try:
            self.app.get_data_loader().import_samples(file_path)
        except ProjectFileError as e:
            logger.warning(str(e))
            QMessageBox.critical(self.window, "Error", str(e))
            return
        self._data_changed()

    def export_samples(self):
        file_path, _ = QFileDialog.getSaveFileName(self.window, "Export Samples", "", "NumPy Data Files (*.npz)")
        if not file_path:
            return
        try:
            self.app.get_data_loader().export_samples(file_path)
        except ProjectFileError as e:
            logger.warning(str(e))
            QMessageBox.critical(self.window, "Error", str(e))
