"""
Application controller.

Owns the network, the data, the training tracker and the background worker,
and tells the window what to repaint.
"""
import argparse
import logging
import sys
import threading
from pathlib import Path

from PyQt6.QtWidgets import QApplication
from PyQt6.QtGui import QFont

from nnplayground import __version__
from nnplayground.config import DATA_FILE, DEFAULT_ENGINE
from nnplayground.logging_config import setup_logging
from nnplayground.model import DataModel, TrainingTracker, create_network, engine_of
from nnplayground.persistence import ProjectLoader, ProjectFileError
from nnplayground.training import TrainingWorker
from nnplayground.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def matching_behavior(old, new):
    """Index of old's behavior among new's, by label, 0 when new has no such behavior"""
    label = old.get_behavior_descriptions()[old.get_behavior()]
    labels = new.get_behavior_descriptions()
    return labels.index(label) if label in labels else 0


class Application:
    def __init__(self, data_file=None):
        self.data_file = Path(data_file) if data_file else DATA_FILE
        self.engine = DEFAULT_ENGINE
        self.net = None
        self.published = None
        self.data = DataModel()
        self.tracker = TrainingTracker()
        self.loader = ProjectLoader(self)
        self.window = None
        self.train_worker = None
        # Protects training, cloning/publishing of the network and edits of the data
        self.train_lock = threading.Lock()

        self.init_network()

    def init(self):
        """Load the last project, hook saving on exit and open the main window"""
        try:
            self.loader.load_from_file(self.data_file)
        except ProjectFileError as e:
            logger.warning(f"Ignoring last project: {e}")
        self.loader.add_shutdown_hook(self.data_file)

        self.window = MainWindow(self)
        self.window.init()
        self.window.show()

    def init_network(self):
        """Create a fresh network with the current topology, keeping the learning parameters"""
        old = self.net
        topology = old.get_topology() if old else None
        initial_range = old.get_initial_range() if old else None

        net = create_network(self.engine, topology, initial_range)
        if old:
            net.set_parameters_from(old)
            net.set_behavior(matching_behavior(old, net))
        self.set_network(net)
        self.update_view(True, True, True)

    def set_engine(self, engine):
        if engine == self.engine:
            return
        was_training = self.is_training()
        self.stop_training(True)
        self.engine = engine
        self.init_network()
        logger.info(f"Switched engine to {self.net.get_engine_name()}")
        if was_training:
            self.start_training()

    def set_network(self, net):
        self.net = net
        self.engine = engine_of(net)
        self.published = None
        self.tracker.reset()

    def get_network(self):
        return self.net

    def get_view_network(self):
        """Network to render: the published clone while training, else the network itself"""
        published = self.published
        if self.is_training() and published is not None:
            return published
        return self.net

    def publish_network(self, clone):
        self.published = clone

    def get_data(self):
        return self.data

    def get_tracker(self):
        return self.tracker

    def get_data_loader(self):
        return self.loader

    def get_network_lock(self):
        return self.train_lock

    def update_view(self, reset_grid_size=False, update_topology=False, update_controls=False):
        if self.window is None or self.window.control_panel is None or self.window.topology_panel is None:
            return

        self.window.control_panel.update_stats()
        self.window.control_panel.update_graph()
        self.window.data_panel.update_output()
        if update_controls:
            self.window.control_panel.update_controls()
            self.window.menu.sync()
        if reset_grid_size:
            self.window.topology_panel.reset_grid_size()
        if update_topology:
            self.window.topology_panel.update_topology()

    # --- Training ---

    def is_training(self):
        return self.train_worker is not None and self.train_worker.isRunning()

    def start_training(self):
        if self.is_training():
            return
        # Views render this clone until the worker publishes its first batch
        with self.train_lock:
            self.published = self.net.clone()
        self.train_worker = TrainingWorker(self)
        if self.window is not None:
            self.train_worker.batch_finished.connect(self.window.on_batch_finished)
            self.train_worker.error_occurred.connect(self.window.show_training_error)
        self.train_worker.finished.connect(self.set_training_stopped)
        self.train_worker.start()

    def stop_training(self, wait=True):
        if self.train_worker is None:
            return
        self.train_worker.kill()
        if wait:
            self.train_worker.wait()

    def set_training_stopped(self):
        """Called when the worker has finished. To stop training, call stop_training()."""
        # A restarted worker may already be running when the old one's signal arrives
        if self.window is None or self.is_training():
            return
        self.window.control_panel.set_training_stopped()
        self.update_view(update_topology=True)

    def set_data_tool(self, tool):
        self.window.data_panel.set_tool(tool)

    # --- Topology and parameters ---

    def _edit_network(self, edit):
        was_training = self.is_training()
        self.stop_training(True)
        with self.train_lock:
            edit(self.net)
        self.published = None
        self.update_view(True, True, True)
        if was_training:
            self.start_training()

    def add_layer(self, position, neurons):
        self._edit_network(lambda net: net.add_layer(position, neurons, reset=False))

    def remove_layer(self, layer):
        self._edit_network(lambda net: net.remove_layer(layer, reset=False))

    def set_neurons_in_layer(self, layer, count):
        self._edit_network(lambda net: net.set_neurons_in_layer(layer, count, reset=False))

    def set_behavior(self, behavior):
        self._edit_network(lambda net: net.set_behavior(behavior))

    def set_initial_range(self, initial_range):
        with self.train_lock:
            self.net.set_initial_range(initial_range)

    def set_eta(self, eta):
        with self.train_lock:
            self.net.set_eta(eta)

    def set_batch_size(self, size):
        with self.train_lock:
            self.net.set_batch_size(size)

    def reset_network(self):
        was_training = self.is_training()
        self.stop_training(True)
        self.init_network()
        if was_training:
            self.start_training()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='nnplayground',
                                     description='Interactive playground for small feed-forward neural networks.')
    parser.add_argument('--data-file', help=f'project file reloaded on startup (default: {DATA_FILE})')
    parser.add_argument('--debug', action='store_true', help='verbose logging')
    parser.add_argument('--log-file', help='also write the log to this file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO, args.log_file)

    qt_app = QApplication(sys.argv[:1])
    qt_app.setApplicationName('Neural Network Playground')
    qt_app.setFont(QFont("Segoe UI", 10))

    appl = Application(args.data_file)
    appl.init()
    sys.exit(qt_app.exec())


if __name__ == '__main__':
    main()
