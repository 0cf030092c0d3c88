"""
Tests for loading session settings.
"""
import logging

import pytest

from octomatch.config import DEFAULT_STATE_FILE, get_default_settings, load_settings


class TestLoadSettings:
    def test_defaults(self):
        settings = get_default_settings()
        assert settings['format'] == 'single'
        assert settings['seed_by_score'] is False
        assert settings['third_place_match'] is True
        assert settings['state_file'] == DEFAULT_STATE_FILE

    def test_no_path(self):
        assert load_settings() == get_default_settings()

    def test_missing_file(self, tmp_path):
        assert load_settings(str(tmp_path / 'absent.yaml')) == get_default_settings()

    def test_merges_over_defaults(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text('format: double\nseed_by_score: true\n')
        settings = load_settings(str(path))
        assert settings['format'] == 'double'
        assert settings['seed_by_score'] is True
        assert settings['third_place_match'] is True
        assert settings['log_level'] == 'WARNING'

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text('')
        assert load_settings(str(path)) == get_default_settings()

    def test_invalid_yaml_warns(self, tmp_path, caplog):
        path = tmp_path / 'settings.yaml'
        path.write_text('format: [double\n')
        with caplog.at_level(logging.WARNING, logger='octomatch.config'):
            settings = load_settings(str(path))
        assert settings == get_default_settings()
        assert 'Failed to parse' in caplog.text

    def test_non_mapping_warns(self, tmp_path, caplog):
        path = tmp_path / 'settings.yaml'
        path.write_text('- single\n- double\n')
        with caplog.at_level(logging.WARNING, logger='octomatch.config'):
            settings = load_settings(str(path))
        assert settings == get_default_settings()
        assert 'expected a mapping' in caplog.text

    def test_log_level_is_normalised(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text('log_level: debug\n')
        assert load_settings(str(path))['log_level'] == 'DEBUG'

    @pytest.mark.parametrize("level", ['verbose', '10', '[info]'])
    def test_unknown_log_level_warns(self, tmp_path, caplog, level):
        path = tmp_path / 'settings.yaml'
        path.write_text(f'format: double\nlog_level: {level}\n')
        with caplog.at_level(logging.WARNING, logger='octomatch.config'):
            settings = load_settings(str(path))
        assert settings['log_level'] == 'WARNING'
        assert settings['format'] == 'double'
        assert 'unknown log_level' in caplog.text
