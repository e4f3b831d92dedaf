"""Tests for configuration loading and settings validation."""
import json

import pytest
import yaml

from config import ConfigManager, ConfigPresets, PoolSettings
from utils.exceptions import ConfigurationError, ValidationError
from validation import PoolSettingsSchema, RangeValidator, Schema, TypeValidator


class TestPoolSettings:
    """Tests for validated pool settings."""

    def test_defaults_filled_in(self):
        settings = PoolSettings.from_dict({'max_size': 3}, name='db')

        assert settings.name == 'db'
        assert settings.max_size == 3
        assert settings.reuse_policy == 'lifo'
        assert settings.block is False
        assert settings.acquire_timeout is None
        assert settings.max_idle_seconds is None
        assert settings.enable_metrics is True

    def test_zero_capacity_is_valid(self):
        assert PoolSettings.from_dict({'max_size': 0}).max_size == 0

    @pytest.mark.parametrize('block', [
        {'max_size': -1},
        {'max_size': True},
        {'max_size': '5'},
        {},
        {'max_size': 2, 'reuse_policy': 'random'},
        {'max_size': 2, 'max_idle_seconds': 0},
        {'max_size': 2, 'acquire_timeout': -0.5},
        {'max_size': 2, 'min_size': 1},
    ])
    def test_invalid_settings(self, block):
        with pytest.raises(ConfigurationError) as excinfo:
            PoolSettings.from_dict(block, name='db')
        assert excinfo.value.details['errors']

    def test_round_trip_through_dict(self):
        settings = PoolSettings.from_dict({'max_size': 4, 'reuse_policy': 'fifo'}, name='workers')
        assert PoolSettings.from_dict(settings.to_dict()) == settings


class TestConfigManager:
    """Tests for the configuration manager."""

    def test_dotted_access(self):
        manager = ConfigManager()
        manager.set('pools.db.max_size', 2)

        assert manager.get('pools.db.max_size') == 2
        assert manager.get('pools.db.missing', 'fallback') == 'fallback'
        assert 'pools.db' in manager.get_config()

    def test_load_yaml(self, tmp_path):
        path = tmp_path / 'pools.yaml'
        path.write_text(yaml.safe_dump({
            'pools': {'db': {'max_size': 2, 'reuse_policy': 'fifo', 'max_idle_seconds': 30}}
        }))

        manager = ConfigManager()
        manager.load_from_file(str(path))
        settings = manager.pool_settings('db')

        assert settings.max_size == 2
        assert settings.reuse_policy == 'fifo'
        assert settings.max_idle_seconds == 30

    def test_load_json_merges(self, tmp_path):
        path = tmp_path / 'pools.json'
        path.write_text(json.dumps({'pools': {'db': {'block': True}}}))

        manager = ConfigManager({'pools': {'db': {'max_size': 2}}})
        manager.load_from_file(str(path))

        assert manager.get('pools.db') == {'max_size': 2, 'block': True}

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / 'empty.yml'
        path.write_text('')

        manager = ConfigManager()
        manager.load_from_file(str(path))

        assert manager.pool_names() == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager().load_from_file(str(tmp_path / 'absent.yaml'))

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / 'pools.ini'
        path.write_text('[pools]')
        with pytest.raises(ConfigurationError):
            ConfigManager().load_from_file(str(path))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / 'broken.yaml'
        path.write_text('pools: [unclosed')
        with pytest.raises(ConfigurationError):
            ConfigManager().load_from_file(str(path))

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / 'list.yaml'
        path.write_text('- 1\n- 2\n')
        with pytest.raises(ConfigurationError):
            ConfigManager().load_from_file(str(path))

    def test_load_from_env(self):
        environ = {
            'POOL_POOLS__DB__MAX_SIZE': '4',
            'POOL_POOLS__DB__REUSE_POLICY': 'fifo',
            'POOL_LOG_LEVEL': 'DEBUG',
            'HOME': '/root',
        }
        manager = ConfigManager()

        count = manager.load_from_env(environ=environ)

        assert count == 2
        settings = manager.pool_settings('db')
        assert settings.max_size == 4
        assert settings.reuse_policy == 'fifo'

    def test_save_and_reload(self, tmp_path):
        manager = ConfigManager(ConfigPresets.workers())
        path = tmp_path / 'out' / 'pools.yaml'

        manager.save_to_file(str(path))
        reloaded = ConfigManager()
        reloaded.load_from_file(str(path))

        assert reloaded.pool_settings('workers') == manager.pool_settings('workers')

    def test_save_unsupported_format(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager().save_to_file(str(tmp_path / 'x.toml'), format='toml')

    def test_unknown_pool(self):
        manager = ConfigManager(ConfigPresets.database())
        with pytest.raises(ConfigurationError) as excinfo:
            manager.pool_settings('cache')
        assert excinfo.value.details['available_pools'] == ['database']

    def test_clear(self):
        manager = ConfigManager(ConfigPresets.database())
        manager.clear()
        assert manager.pool_names() == []


class TestPresets:
    """Tests for configuration presets."""

    @pytest.mark.parametrize('preset', ['database', 'workers', 'single_slot'])
    def test_presets_validate(self, preset):
        manager = ConfigManager(ConfigPresets.get(preset))
        for name in manager.pool_names():
            assert manager.pool_settings(name).name == name

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            ConfigPresets.get('cluster')

    def test_presets_are_independent_copies(self):
        first = ConfigPresets.database()
        first['pools']['database']['max_size'] = 99
        assert ConfigPresets.database()['pools']['database']['max_size'] == 5


class TestSchema:
    """Tests for schema validation."""

    def test_non_strict_keeps_extra_fields(self):
        schema = Schema({'size': int})
        assert schema.validate({'size': 1, 'extra': 'x'}) == {'size': 1, 'extra': 'x'}

    def test_collects_every_error(self):
        with pytest.raises(ValidationError) as excinfo:
            PoolSettingsSchema().validate({'max_size': -1, 'block': 'yes'})
        assert len(excinfo.value.details['errors']) == 2

    def test_rejects_non_dict(self):
        with pytest.raises(ValidationError):
            Schema({'size': int}).validate(['size'])

    def test_type_validator_rejects_bool_for_int(self):
        with pytest.raises(ValidationError):
            TypeValidator(int).validate(False)
        assert TypeValidator(bool).validate(False) is False

    def test_exclusive_range(self):
        validator = RangeValidator(min_value=0, inclusive=False)
        assert validator(0.5) == 0.5
        with pytest.raises(ValidationError):
            validator(0)
