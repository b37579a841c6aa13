import pytest
from PyQt6.QtCore import QCoreApplication

from nnplayground.app import Application, matching_behavior
from nnplayground.model import SklearnNetworkWrapper, TorchNetworkWrapper, create_network
from nnplayground.training import TrainingWorker


@pytest.fixture(scope='module')
def qt_app():
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def app(qt_app, tmp_path, linear_data):
    application = Application(tmp_path / 'project.json')
    application.get_data().copy_from(linear_data)
    yield application
    application.stop_training(True)


class ExplodingNetwork:
    def get_engine_name(self):
        return 'exploding'

    def train(self, data, tracker=None):
        raise RuntimeError('diverged')


def test_init_network_keeps_parameters(app):
    old = app.get_network()
    old.set_eta(0.2)
    old.set_batch_size(300)
    old.set_initial_range(0.3)
    app.set_behavior(4)
    app.get_tracker().add_record(1.0, 1.0)

    app.init_network()

    net = app.get_network()
    assert net is not old
    assert net.get_eta() == 0.2
    assert net.get_batch_size() == 300
    assert net.get_initial_range() == 0.3
    assert net.get_behavior() == 4
    assert net.get_topology() == old.get_topology()
    assert app.get_tracker().get_iterations() == 0


def test_set_engine_switches_wrapper(app):
    assert isinstance(app.get_network(), TorchNetworkWrapper)
    app.set_engine('sklearn')
    assert isinstance(app.get_network(), SklearnNetworkWrapper)
    assert app.engine == 'sklearn'
    app.set_engine('torch')
    assert isinstance(app.get_network(), TorchNetworkWrapper)


def test_set_engine_keeps_behavior_by_label(app):
    app.set_behavior(app.get_network().get_behavior_descriptions().index('Tanh'))
    app.set_engine('sklearn')
    net = app.get_network()
    assert net.get_behavior_descriptions()[net.get_behavior()] == 'Tanh'


def test_behavior_without_counterpart_falls_back_to_first():
    torch_net = create_network('torch', [2, 3, 1])
    torch_net.set_behavior(torch_net.get_behavior_descriptions().index('Sigmoid'))
    assert matching_behavior(torch_net, create_network('sklearn', [2, 3, 1])) == 0


def test_views_never_render_the_trained_network(app):
    app.get_network().set_batch_size(40000)
    app.start_training()
    assert app.is_training()
    assert app.get_view_network() is not app.get_network()
    app.stop_training(True)
    assert app.get_view_network() is app.get_network()


def test_stop_training_kills_worker(app):
    app.start_training()
    worker = app.train_worker
    app.stop_training(True)

    assert worker.killed
    assert worker.isFinished()
    assert not app.is_training()


def test_worker_reports_engine_failure(app):
    app.net = ExplodingNetwork()
    worker = TrainingWorker(app)
    errors = []
    batches = []
    worker.error_occurred.connect(errors.append)
    worker.batch_finished.connect(batches.append)

    # Runs on this thread, returns once the loop has ended
    worker.run()

    assert errors == ['diverged']
    assert batches == []
    assert app.get_tracker().get_iterations() == 0
