"""
Background training.

The worker loops over training batches on its own thread. Each batch runs
under the application's network lock and ends by publishing a clone of the
network, which the views render without racing the trainer.
"""
import logging

from PyQt6.QtCore import QThread, pyqtSignal

from nnplayground.model.trainer import train_step

logger = logging.getLogger(__name__)


class TrainingWorker(QThread):
    batch_finished = pyqtSignal(int)
    error_occurred = pyqtSignal(str)

    def __init__(self, app):
        super().__init__()
        self.app = app
        self.killed = False

    def run(self):
        logger.info(f"Training started ({self.app.get_network().get_engine_name()})")
        tracker = self.app.get_tracker()
        try:
            while not self.killed:
                clone = train_step(self.app.get_network(), self.app.get_data(),
                                   tracker, self.app.get_network_lock())
                if self.app.get_data().get_num_of_samples(True) == 0:
                    # Nothing to learn, avoid spinning
                    self.msleep(50)
                self.app.publish_network(clone)
                self.batch_finished.emit(tracker.get_iterations())
        except Exception as e:
            logger.exception("Training failed")
            self.error_occurred.emit(str(e))
        logger.info(f"Training stopped after {tracker.get_iterations()} iterations")

    def kill(self):
        self.killed = True
