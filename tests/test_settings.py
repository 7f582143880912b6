import logging
import unittest

from report.settings import CONFIG_ENV_VAR, DEFAULT_SETTINGS, default_settings_path, load_export_settings, resolve_settings


class TestExportSettings(unittest.TestCase):
    def test_bundled_file_matches_defaults(self):
        settings = load_export_settings(default_settings_path())
        self.assertEqual(settings, DEFAULT_SETTINGS)

    def test_missing_file_returns_defaults(self):
        settings = load_export_settings('/nonexistent/export.yaml')
        self.assertEqual(settings, DEFAULT_SETTINGS)
        self.assertIsNot(settings, DEFAULT_SETTINGS)


def test_overrides_are_merged(tmp_path):
    path = tmp_path / 'export.yaml'
    path.write_text(
        "max_title_length: 60\n"
        "status_colors:\n"
        "  merged: '#000080'\n"
        "unknown_key: 1\n",
        encoding='utf-8',
    )
    settings = load_export_settings(str(path))
    assert settings['max_title_length'] == 60
    assert settings['status_colors']['merged'] == '#000080'
    assert settings['status_colors']['open'] == DEFAULT_SETTINGS['status_colors']['open']
    assert settings['separator'] == ' [...] '
    assert 'unknown_key' not in settings


def test_env_var_points_at_settings(tmp_path, monkeypatch):
    path = tmp_path / 'custom.yaml'
    path.write_text("default_label_color: '#cccccc'\n", encoding='utf-8')
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_export_settings()['default_label_color'] == 'cccccc'


def test_invalid_yaml_falls_back_with_warning(tmp_path, caplog):
    path = tmp_path / 'broken.yaml'
    path.write_text("max_title_length: [unclosed\n", encoding='utf-8')
    with caplog.at_level(logging.WARNING, logger='report.settings'):
        settings = load_export_settings(str(path))
    assert settings == DEFAULT_SETTINGS
    assert 'Ignoring export settings' in caplog.text


def test_non_mapping_yaml_falls_back(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text("- a\n- b\n", encoding='utf-8')
    assert load_export_settings(str(path)) == DEFAULT_SETTINGS


def test_bad_value_type_falls_back(tmp_path):
    path = tmp_path / 'bad.yaml'
    path.write_text("max_title_length: lots\n", encoding='utf-8')
    assert load_export_settings(str(path)) == DEFAULT_SETTINGS


def test_nested_value_of_wrong_shape_is_ignored(tmp_path):
    path = tmp_path / 'colors.yaml'
    path.write_text("status_colors: red\nseparator: ' ~ '\n", encoding='utf-8')
    settings = load_export_settings(str(path))
    assert settings['status_colors'] == DEFAULT_SETTINGS['status_colors']
    assert settings['separator'] == ' ~ '


class TestResolveSettings(unittest.TestCase):
    def test_none_gives_a_copy_of_defaults(self):
        settings = resolve_settings(None)
        self.assertEqual(settings, DEFAULT_SETTINGS)
        self.assertIsNot(settings, DEFAULT_SETTINGS)

    def test_partial_overrides_keep_remaining_defaults(self):
        settings = resolve_settings({'max_title_length': '40', 'status_colors': {'open': '#00ff00', 'pending': '#fff'}})
        self.assertEqual(settings['max_title_length'], 40)
        self.assertEqual(settings['separator'], DEFAULT_SETTINGS['separator'])
        self.assertEqual(settings['status_colors']['open'], '#00ff00')
        self.assertEqual(settings['status_colors']['merged'], DEFAULT_SETTINGS['status_colors']['merged'])
        self.assertNotIn('pending', settings['status_colors'])

    def test_defaults_are_not_mutated(self):
        resolve_settings({'status_colors': {'open': '#00ff00'}})
        self.assertEqual(DEFAULT_SETTINGS['status_colors']['open'], '#1a7f37')

    def test_unusable_values_fall_back(self):
        with self.assertLogs('report.settings', level='WARNING'):
            settings = resolve_settings({'max_title_length': 'lots'})
        self.assertEqual(settings, DEFAULT_SETTINGS)
        self.assertEqual(resolve_settings('compact'), DEFAULT_SETTINGS)


if __name__ == '__main__':
    unittest.main()
