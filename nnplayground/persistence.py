"""
Project persistence.

The last used project (samples plus network settings) lives in a JSON file in
the user's home directory. It is reloaded on startup and written back when
the interpreter exits.
"""
import atexit
import json
import logging
from pathlib import Path

import numpy as np

from nnplayground.model import DataModel, create_network, engine_of

logger = logging.getLogger(__name__)

FILE_VERSION = 1


class ProjectFileError(RuntimeError):
    """A project or sample file could not be read or written"""


class ProjectLoader:
    """
    Loads and saves the project of a workspace.

    The workspace (normally the Application) provides get_data(),
    get_network(), set_network(network) and get_network_lock().
    """

    def __init__(self, workspace):
        self.workspace = workspace
        self._hooked = set()

    def to_dict(self):
        network = self.workspace.get_network()
        return {
            'version': FILE_VERSION,
            'engine': engine_of(network),
            'network': {
                'topology': network.get_topology(),
                'eta': network.get_eta(),
                'batch_size': network.get_batch_size(),
                'behavior': network.get_behavior(),
                'initial_range': network.get_initial_range(),
            },
            'data': self.workspace.get_data().to_dict(),
        }

    def save_to_file(self, path):
        path = Path(path)
        with self.workspace.get_network_lock():
            project = self.to_dict()
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(project, f, indent=2)
        except OSError as e:
            raise ProjectFileError(f"Failed to save project to {path}: {e}") from e
        logger.info(f"Saved project to {path}")

    def load_from_file(self, path):
        """Load a project, returns False if the file does not exist"""
        path = Path(path)
        if not path.exists():
            logger.info(f"No project file at {path}, starting with empty data")
            return False

        try:
            with open(path, 'r', encoding='utf-8') as f:
                project = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ProjectFileError(f"Failed to read project {path}: {e}") from e

        # Build everything first so a broken file leaves the workspace untouched
        try:
            if project.get('version', FILE_VERSION) > FILE_VERSION:
                raise ValueError(f"unsupported file version {project['version']}")
            data = DataModel.from_dict(project.get('data', {}))
            network = self._network_from_dict(project.get('engine', 'torch'), project.get('network', {}))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProjectFileError(f"Malformed project {path}: {e}") from e

        with self.workspace.get_network_lock():
            self.workspace.get_data().copy_from(data)
        self.workspace.set_network(network)
        logger.info(f"Loaded project from {path} ({data.get_num_of_samples(True)} training, "
                    f"{data.get_num_of_samples(False)} test samples)")
        return True

    @staticmethod
    def _network_from_dict(engine, settings):
        network = create_network(engine, settings['topology'],
                                 settings.get('initial_range'))
        if 'eta' in settings:
            network.set_eta(settings['eta'])
        if 'batch_size' in settings:
            network.set_batch_size(settings['batch_size'])
        network.set_behavior(int(settings.get('behavior', 0)))
        return network

    def add_shutdown_hook(self, path):
        """Save the project to path when the interpreter exits"""
        path = str(path)
        if path in self._hooked:
            return
        self._hooked.add(path)
        atexit.register(self._save_on_exit, path)

    def _save_on_exit(self, path):
        try:
            self.save_to_file(path)
        except ProjectFileError:
            logger.exception("Could not save the project on exit")

    def export_samples(self, path):
        data = self.workspace.get_data()
        with self.workspace.get_network_lock():
            X_train, Y_train = data.get_training_lesson().as_arrays()
            X_test, Y_test = data.get_test_lesson().as_arrays()
        X = np.vstack([X_train, X_test])
        values = np.concatenate([Y_train.ravel(), Y_test.ravel()])
        test = np.concatenate([np.zeros(len(X_train), dtype=bool), np.ones(len(X_test), dtype=bool)])
        try:
            np.savez(path, X=X, values=values, test=test)
        except OSError as e:
            raise ProjectFileError(f"Failed to export samples to {path}: {e}") from e
        logger.info(f"Exported {len(X)} samples to {path}")

    def import_samples(self, path):
        try:
            with np.load(path, allow_pickle=False) as f:
                if 'X' not in f or 'values' not in f:
                    raise ProjectFileError(f"{path} does not contain 'X' and 'values' arrays")
                X = f['X']
                values = f['values']
                test = f['test'] if 'test' in f else None
        except (OSError, ValueError, TypeError, AttributeError) as e:
            # Plain .npy files load as arrays and fail on the 'with' statement
            raise ProjectFileError(f"Failed to import samples from {path}: {e}") from e

        imported = DataModel()
        try:
            imported.set_samples(X, values, test)
        except ValueError as e:
            raise ProjectFileError(f"Malformed samples in {path}: {e}") from e

        with self.workspace.get_network_lock():
            self.workspace.get_data().copy_from(imported)
        logger.info(f"Imported {len(X)} samples from {path}")
        return len(X)
