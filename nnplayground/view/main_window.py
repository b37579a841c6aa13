import logging

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QMainWindow, QWidget, QVBoxLayout, QSplitter, QSizePolicy, QMessageBox

from nnplayground import __version__
from nnplayground.view.control_panel import ControlPanel
from nnplayground.view.data_panel import DataPanel
from nnplayground.view.menu import Menu
from nnplayground.view.topology_panel import TopologyPanel

logger = logging.getLogger(__name__)

STYLE_SHEET = """
    QMainWindow {
        background-color: #f0f0f0;
    }
    QWidget {
        background-color: #f0f0f0;
        color: #333;
        font-family: 'Segoe UI', Arial, sans-serif;
    }
    QGroupBox {
        border: 1px solid #ccc;
        border-radius: 5px;
        background-color: #ffffff;
        margin-top: 12px;
        font-weight: bold;
    }
    QGroupBox::title {
        subcontrol-origin: margin;
        left: 10px;
        color: #0078d7;
    }
    QPushButton {
        background-color: #e7e7e7;
        border: 1px solid #ccc;
        border-radius: 3px;
        padding: 5px;
    }
    QPushButton:hover {
        background-color: #d7d7d7;
    }
    QPushButton:pressed, QPushButton:checked {
        background-color: #c7c7c7;
    }
    QSpinBox, QDoubleSpinBox, QComboBox {
        background-color: #ffffff;
        border: 1px solid #ccc;
        border-radius: 3px;
        padding: 3px;
    }
    #StatLabel {
        font-size: 12pt;
        font-weight: bold;
    }
"""


class MainWindow(QMainWindow):
    def __init__(self, app):
        super().__init__()
        self.app = app
        self.data_panel = None
        self.topology_panel = None
        self.control_panel = None
        self.menu = None

    def init(self):
        self.setWindowTitle(f'Neural Network Playground {__version__}')
        self.setGeometry(100, 100, 1400, 900)
        self.setStyleSheet(STYLE_SHEET)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        vertical_splitter = QSplitter(Qt.Orientation.Vertical)
        main_layout.addWidget(vertical_splitter)

        panels_splitter = QSplitter(Qt.Orientation.Horizontal)
        self.data_panel = DataPanel(self.app)
        self.data_panel.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.topology_panel = TopologyPanel(self.app)
        self.topology_panel.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        panels_splitter.addWidget(self.data_panel)
        panels_splitter.addWidget(self.topology_panel)
        panels_splitter.setSizes([600, 800])
        vertical_splitter.addWidget(panels_splitter)

        self.control_panel = ControlPanel(self.app)
        vertical_splitter.addWidget(self.control_panel)
        vertical_splitter.setSizes([600, 300])

        # The menu needs the panels, it wires actions to them
        self.menu = Menu(self.app, self)
        self.menu.init()

        self.app.update_view(True, True, True)

    def on_batch_finished(self, iteration):
        """Labels every iteration, the expensive plots every few"""
        self.control_panel.update_stats()
        if iteration % self.control_panel.repaint_interval() == 0:
            self.control_panel.update_graph()
            self.data_panel.update_output()
            self.topology_panel.update_topology()

    def show_training_error(self, message):
        QMessageBox.critical(self, "Training failed", message)

    def closeEvent(self, event):
        self.app.stop_training(True)
        event.accept()
