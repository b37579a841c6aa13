import logging

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel, QPushButton,
                             QSpinBox, QDoubleSpinBox, QComboBox, QGroupBox)

from nnplayground.config import (
    ERROR_GRAPH_MAX_POINTS, DEFAULT_REPAINT_INTERVAL, NETWORK_MAX_NEURONS_PER_LAYER
)
from nnplayground.model import ENGINES
from nnplayground.view.error_graph import ErrorGraph

logger = logging.getLogger(__name__)

ETA_CHOICES = ['0.0001', '0.0003', '0.001', '0.003', '0.01', '0.03', '0.1', '0.3', '1']


class ControlPanel(QWidget):
    """Training controls, network parameters, hidden layer editor and statistics"""

    def __init__(self, app, parent=None):
        super().__init__(parent)
        self.app = app
        self.hidden_layer_rows = []
        self.error_graph = ErrorGraph()
        self.init_ui()

    def init_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(10, 5, 10, 5)
        layout.setSpacing(15)

        left = QVBoxLayout()
        left.addWidget(self.create_training_group())
        left.addWidget(self.create_layers_group())
        left.addStretch()
        layout.addLayout(left)

        right = QVBoxLayout()
        right.addWidget(self.create_stats_group())
        right.addWidget(self.error_graph, stretch=1)
        layout.addLayout(right, stretch=1)

    def create_training_group(self):
        group = QGroupBox("TRAINING")
        grid = QGridLayout(group)
        grid.setSpacing(10)

        # === Run and Reset ===
        self.run_button = QPushButton("▶")
        self.run_button.setCheckable(True)
        self.run_button.setFixedSize(40, 40)
        self.run_button.setStyleSheet("font-size: 20px;")
        self.run_button.setToolTip("Start / stop training")
        self.run_button.toggled.connect(self.toggle_training)

        self.reset_button = QPushButton("↺")
        self.reset_button.setFixedSize(40, 40)
        self.reset_button.setStyleSheet("font-size: 20px;")
        self.reset_button.setToolTip("Re-initialise the network weights")
        self.reset_button.clicked.connect(self.app.reset_network)

        buttons = QHBoxLayout()
        buttons.addWidget(self.run_button)
        buttons.addWidget(self.reset_button)
        buttons.addStretch()
        grid.addLayout(buttons, 0, 0, 1, 4)

        # === Engine and parameters ===
        grid.addWidget(QLabel("Engine"), 1, 0)
        self.engine_combo = QComboBox()
        for key, (label, _) in ENGINES.items():
            self.engine_combo.addItem(label, key)
        self.engine_combo.currentIndexChanged.connect(self.on_engine_changed)
        grid.addWidget(self.engine_combo, 2, 0)

        grid.addWidget(QLabel("Activation"), 1, 1)
        self.behavior_combo = QComboBox()
        self.behavior_combo.currentIndexChanged.connect(self.on_behavior_changed)
        grid.addWidget(self.behavior_combo, 2, 1)

        grid.addWidget(QLabel("Learning rate"), 1, 2)
        self.eta_combo = QComboBox()
        self.eta_combo.setEditable(True)
        self.eta_combo.addItems(ETA_CHOICES)
        self.eta_combo.currentTextChanged.connect(self.on_eta_changed)
        grid.addWidget(self.eta_combo, 2, 2)

        grid.addWidget(QLabel("Batch size"), 1, 3)
        self.batch_size_spinbox = QSpinBox()
        self.batch_size_spinbox.setRange(1, 1000000)
        self.batch_size_spinbox.setSingleStep(1000)
        self.batch_size_spinbox.setToolTip("Sample presentations per training iteration")
        self.batch_size_spinbox.valueChanged.connect(self.app.set_batch_size)
        grid.addWidget(self.batch_size_spinbox, 2, 3)

        grid.addWidget(QLabel("Initial range"), 3, 0)
        self.initial_range_spinbox = QDoubleSpinBox()
        self.initial_range_spinbox.setRange(0.01, 10.0)
        self.initial_range_spinbox.setSingleStep(0.05)
        self.initial_range_spinbox.setDecimals(2)
        self.initial_range_spinbox.setToolTip("Weights start uniformly in [-range, range], used on reset")
        self.initial_range_spinbox.valueChanged.connect(self.app.set_initial_range)
        grid.addWidget(self.initial_range_spinbox, 4, 0)

        grid.addWidget(QLabel("Repaint every"), 3, 1)
        self.repaint_spinbox = QSpinBox()
        self.repaint_spinbox.setRange(1, 1000)
        self.repaint_spinbox.setValue(DEFAULT_REPAINT_INTERVAL)
        self.repaint_spinbox.setSuffix(" it.")
        self.repaint_spinbox.setToolTip("Repaint data, topology and error graph every N iterations")
        grid.addWidget(self.repaint_spinbox, 4, 1)
        return group

    def create_layers_group(self):
        group = QGroupBox("HIDDEN LAYERS")
        layout = QVBoxLayout(group)

        self.hidden_layers_layout = QVBoxLayout()
        self.hidden_layers_layout.setSpacing(8)
        layout.addLayout(self.hidden_layers_layout)

        add_layer_button = QPushButton("Add Layer")
        add_layer_button.setFixedWidth(150)
        add_layer_button.clicked.connect(self.add_hidden_layer)
        row = QHBoxLayout()
        row.addStretch()
        row.addWidget(add_layer_button)
        row.addStretch()
        layout.addLayout(row)
        return group

    def create_stats_group(self):
        group = QGroupBox("STATISTICS")
        grid = QGridLayout(group)
        self.stat_labels = {}
        for column, (key, title) in enumerate([('iteration', 'Iteration'), ('presentations', 'Presentations'),
                                               ('training', 'Training error'), ('test', 'Test error'),
                                               ('time', 'Time / iteration')]):
            grid.addWidget(QLabel(title), 0, column)
            label = QLabel("-")
            label.setObjectName("StatLabel")
            grid.addWidget(label, 1, column)
            self.stat_labels[key] = label
        return group

    # --- Hidden layer rows ---

    def rebuild_hidden_layers(self, topology):
        while self.hidden_layer_rows:
            self._remove_row(self.hidden_layer_rows.pop())

        for layer in range(1, len(topology) - 1):
            row = QHBoxLayout()
            row.setSpacing(10)

            label = QLabel(f"Layer {layer}")
            label.setFixedWidth(60)

            spinbox = QSpinBox()
            spinbox.setRange(1, NETWORK_MAX_NEURONS_PER_LAYER)
            spinbox.setValue(topology[layer])
            spinbox.valueChanged.connect(lambda count, layer=layer: self.app.set_neurons_in_layer(layer, count))

            remove_button = QPushButton("Remove")
            remove_button.clicked.connect(lambda _, layer=layer: self.app.remove_layer(layer))

            row.addWidget(label)
            row.addWidget(spinbox)
            row.addStretch()
            row.addWidget(remove_button)
            self.hidden_layers_layout.addLayout(row)
            self.hidden_layer_rows.append(row)

    def _remove_row(self, row):
        while row.count():
            widget = row.takeAt(0).widget()
            if widget is not None:
                widget.blockSignals(True)
                widget.deleteLater()
        self.hidden_layers_layout.removeItem(row)
        row.deleteLater()

    def add_hidden_layer(self):
        net = self.app.get_network()
        # New layers go right in front of the output layer
        self.app.add_layer(net.count_layers() - 1, 4)

    # --- Handlers ---

    def toggle_training(self, checked):
        if checked:
            self.run_button.setText("⏹")
            self.app.start_training()
        else:
            self.app.stop_training(True)
            self.run_button.setText("▶")

    def on_engine_changed(self, index):
        self.app.set_engine(self.engine_combo.itemData(index))

    def on_behavior_changed(self, index):
        if index >= 0:
            self.app.set_behavior(index)

    def on_eta_changed(self, text):
        try:
            eta = float(text)
        except ValueError:
            # Half typed value in the editable combo box
            return
        if eta > 0:
            self.app.set_eta(eta)

    # --- Updates from the application ---

    def update_controls(self):
        """Sync all controls with the network without triggering their handlers"""
        net = self.app.get_network()
        widgets = [self.engine_combo, self.behavior_combo, self.eta_combo,
                   self.batch_size_spinbox, self.initial_range_spinbox]
        for widget in widgets:
            widget.blockSignals(True)
        try:
            self.engine_combo.setCurrentIndex(self.engine_combo.findData(self.app.engine))
            self.behavior_combo.clear()
            self.behavior_combo.addItems(net.get_behavior_descriptions())
            self.behavior_combo.setCurrentIndex(net.get_behavior())
            self.eta_combo.setCurrentText(f"{net.get_eta():g}")
            self.batch_size_spinbox.setValue(net.get_batch_size())
            self.initial_range_spinbox.setValue(net.get_initial_range())
        finally:
            for widget in widgets:
                widget.blockSignals(False)

        topology = net.get_topology()
        if len(self.hidden_layer_rows) != len(topology) - 2:
            self.rebuild_hidden_layers(topology)
        else:
            for layer, row in enumerate(self.hidden_layer_rows, start=1):
                spinbox = row.itemAt(1).widget()
                spinbox.blockSignals(True)
                spinbox.setValue(topology[layer])
                spinbox.blockSignals(False)

    def update_stats(self):
        tracker = self.app.get_tracker()
        record = tracker.get_last_record()
        if record is None:
            net = self.app.get_view_network()
            data = self.app.get_data()
            training_error = net.get_training_error(data)
            test_error = net.get_test_error(data)
        else:
            training_error = record.training_error
            test_error = record.test_error

        self.stat_labels['iteration'].setText(f"{tracker.get_iterations():,}")
        self.stat_labels['presentations'].setText(f"{tracker.get_presentations():,}")
        self.stat_labels['training'].setText(f"{training_error:.5f}")
        self.stat_labels['test'].setText(f"{test_error:.5f}")
        self.stat_labels['time'].setText(f"{tracker.get_average_time() * 1000:.1f} ms")

    def update_graph(self):
        self.error_graph.plot_errors(*self.app.get_tracker().get_series(ERROR_GRAPH_MAX_POINTS))

    def repaint_interval(self):
        return self.repaint_spinbox.value()

    def set_training_stopped(self):
        self.run_button.blockSignals(True)
        self.run_button.setChecked(False)
        self.run_button.setText("▶")
        self.run_button.blockSignals(False)
