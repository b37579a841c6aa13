import json

import numpy as np
import pytest

from nnplayground.model import SklearnNetworkWrapper, TorchNetworkWrapper
from nnplayground.persistence import FILE_VERSION, ProjectFileError, ProjectLoader


def _fill(workspace):
    data = workspace.get_data()
    data.add_sample(0.1, 0.2, 1.0)
    data.add_sample(-0.5, 0.5, -1.0)
    data.add_sample(0.3, -0.3, 1.0, test=True)


def test_save_and_load_round_trip(workspace, tmp_path):
    _fill(workspace)
    net = workspace.get_network()
    net.add_layer(1, 3)
    net.set_eta(0.12)
    net.set_batch_size(2500)
    net.set_behavior(4)

    path = tmp_path / 'project.json'
    loader = ProjectLoader(workspace)
    loader.save_to_file(path)

    with open(path) as f:
        project = json.load(f)
    assert project['version'] == FILE_VERSION
    assert project['engine'] == 'torch'

    saved_data = workspace.get_data().to_dict()
    workspace.get_data().clear()
    old_network = workspace.get_network()

    assert loader.load_from_file(path) is True
    assert workspace.get_data().to_dict() == saved_data
    restored = workspace.get_network()
    assert restored is not old_network
    assert isinstance(restored, TorchNetworkWrapper)
    assert restored.get_topology() == old_network.get_topology()
    assert restored.get_eta() == 0.12
    assert restored.get_batch_size() == 2500
    assert restored.get_behavior() == 4


def test_engine_is_restored(workspace, tmp_path):
    path = tmp_path / 'project.json'
    project = ProjectLoader(workspace).to_dict()
    project['engine'] = 'sklearn'
    path.write_text(json.dumps(project))

    assert ProjectLoader(workspace).load_from_file(path)
    assert isinstance(workspace.get_network(), SklearnNetworkWrapper)


def test_missing_file_is_not_an_error(workspace, tmp_path):
    _fill(workspace)
    before = workspace.get_data().to_dict()
    assert ProjectLoader(workspace).load_from_file(tmp_path / 'nothing.json') is False
    assert workspace.get_data().to_dict() == before


@pytest.mark.parametrize('content', [
    'not json at all',
    '[1, 2, 3]',
    json.dumps({'version': FILE_VERSION + 1}),
    json.dumps({'engine': 'torch', 'network': {}, 'data': {}}),
    json.dumps({'engine': 'snipe', 'network': {'topology': [2, 1]}}),
    json.dumps({'network': {'topology': [2, 0, 1]}}),
    json.dumps({'network': {'topology': [2, 1]}, 'data': {'training': [[0.1]]}}),
])
def test_broken_files_leave_workspace_untouched(workspace, tmp_path, content):
    _fill(workspace)
    before = workspace.get_data().to_dict()
    network = workspace.get_network()

    path = tmp_path / 'broken.json'
    path.write_text(content)
    with pytest.raises(ProjectFileError):
        ProjectLoader(workspace).load_from_file(path)

    assert workspace.get_data().to_dict() == before
    assert workspace.get_network() is network


def test_save_to_unwritable_path(workspace, tmp_path):
    with pytest.raises(ProjectFileError):
        ProjectLoader(workspace).save_to_file(tmp_path / 'missing' / 'project.json')


def test_shutdown_hook_registers_once(workspace, tmp_path, monkeypatch):
    registered = []
    monkeypatch.setattr('atexit.register', lambda *args: registered.append(args))
    loader = ProjectLoader(workspace)
    loader.add_shutdown_hook(tmp_path / 'p.json')
    loader.add_shutdown_hook(tmp_path / 'p.json')
    assert len(registered) == 1

    func, path = registered[0]
    func(path)
    assert (tmp_path / 'p.json').exists()


def test_export_and_import_samples(workspace, tmp_path):
    _fill(workspace)
    path = tmp_path / 'samples.npz'
    loader = ProjectLoader(workspace)
    loader.export_samples(path)

    with np.load(path) as f:
        assert f['X'].shape == (3, 2)
        assert list(f['test']) == [False, False, True]

    before = workspace.get_data().to_dict()
    workspace.get_data().clear()
    assert loader.import_samples(path) == 3
    assert workspace.get_data().to_dict() == before


def test_import_without_test_mask(workspace, tmp_path):
    path = tmp_path / 'plain.npz'
    np.savez(path, X=np.array([[0.1, 0.1], [0.2, -0.2]]), values=np.array([1.0, -1.0]))
    assert ProjectLoader(workspace).import_samples(path) == 2
    assert workspace.get_data().get_num_of_samples(True) == 2


def test_import_rejects_bad_files(workspace, tmp_path):
    _fill(workspace)
    before = workspace.get_data().to_dict()
    loader = ProjectLoader(workspace)

    missing_keys = tmp_path / 'other.npz'
    np.savez(missing_keys, points=np.zeros((2, 2)))
    mismatched = tmp_path / 'mismatched.npz'
    np.savez(mismatched, X=np.zeros((3, 2)), values=np.ones(2))
    garbage = tmp_path / 'garbage.npz'
    garbage.write_bytes(b'definitely not numpy')

    for path in (missing_keys, mismatched, garbage, tmp_path / 'absent.npz'):
        with pytest.raises(ProjectFileError):
            loader.import_samples(path)
    assert workspace.get_data().to_dict() == before
