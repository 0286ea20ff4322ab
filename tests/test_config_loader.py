import pytest

from config.config_loader import load_config, merge_config


def test_packaged_defaults():
    config = load_config()
    assert config['protocol']['baseline_duration'] == 60
    assert config['processing']['outlier_passes'] == 0
    assert config['processing']['std_threshold'] == 2.0
    assert config['output']['image_format'] == 'png'
    assert config['concurrency']['max_workers'] >= 1


def test_user_file_only_overrides_its_keys(tmp_path):
    user = tmp_path / "user.yaml"
    user.write_text("processing:\n  outlier_passes: 3\noutput:\n  directory: results\n", encoding='utf-8')

    config = load_config(str(user))
    assert config['processing']['outlier_passes'] == 3
    assert config['processing']['std_threshold'] == 2.0
    assert config['output']['directory'] == 'results'
    assert config['output']['image_format'] == 'png'


def test_missing_or_malformed_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))

    bad = tmp_path / "list.yaml"
    bad.write_text("- 1\n- 2\n", encoding='utf-8')
    with pytest.raises(ValueError):
        load_config(str(bad))


def test_merge_config_does_not_touch_inputs():
    base = {'a': {'b': 1, 'c': 2}, 'd': 3}
    overrides = {'a': {'b': 10}, 'e': [1]}
    merged = merge_config(base, overrides)
    assert merged == {'a': {'b': 10, 'c': 2}, 'd': 3, 'e': [1]}
    assert base == {'a': {'b': 1, 'c': 2}, 'd': 3}
