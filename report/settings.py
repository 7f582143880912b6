"""
Export settings.
Loads clipboard export options from a YAML file when available, otherwise returns defaults.
"""
import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# filename used for export YAML configuration
SETTINGS_FILENAME = 'export.yaml'

# environment override for the settings path
CONFIG_ENV_VAR = 'ACTIVITY_DIGEST_CONFIG'

DEFAULT_SETTINGS: Dict[str, Any] = {
    'max_title_length': 100,
    'separator': ' [...] ',
    'status_colors': {
        'merged': '#8250df',
        'closed': '#cf222e',
        'open': '#1a7f37',
    },
    'default_label_color': 'ededed',
}


def default_settings_path() -> str:
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), 'config', SETTINGS_FILENAME)


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay known keys from overrides onto base; unknown keys are ignored."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if key not in merged or value is None:
            continue
        if isinstance(merged[key], dict):
            if isinstance(value, dict):
                merged[key].update({k: str(v) for k, v in value.items() if k in merged[key] and v})
            continue
        merged[key] = value
    merged['max_title_length'] = int(merged['max_title_length'])
    merged['separator'] = str(merged['separator'])
    merged['default_label_color'] = str(merged['default_label_color']).lstrip('#')
    return merged


def resolve_settings(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Overlay caller-supplied settings on the defaults. Missing keys take defaults;
    values that cannot be used (wrong types) make the whole override fall back to defaults.
    """
    if not isinstance(overrides, dict):
        return copy.deepcopy(DEFAULT_SETTINGS)
    try:
        return _merge(DEFAULT_SETTINGS, overrides)
    except (ValueError, TypeError) as ex:
        logger.warning("Ignoring invalid export settings: %s", ex)
        return copy.deepcopy(DEFAULT_SETTINGS)


def load_export_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load export settings from YAML, falling back to defaults when the file is missing or unreadable.
    Path resolution: explicit argument, then ACTIVITY_DIGEST_CONFIG, then config/export.yaml.
    """
    path = path or os.getenv(CONFIG_ENV_VAR) or default_settings_path()
    if not os.path.exists(path):
        return copy.deepcopy(DEFAULT_SETTINGS)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"expected a mapping, got {type(data).__name__}")
        return _merge(DEFAULT_SETTINGS, data)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as ex:
        logger.warning("Ignoring export settings in %s: %s", path, ex)
        return copy.deepcopy(DEFAULT_SETTINGS)
