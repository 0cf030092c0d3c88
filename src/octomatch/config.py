"""
Settings for a tournament session, read from an optional YAML file.
"""
import logging
import os

import yaml

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = 'tournament.yaml'


def get_default_settings():
    """Return default settings."""
    return {
        'format': 'single',
        'seed_by_score': False,
        'third_place_match': True,
        'state_file': DEFAULT_STATE_FILE,
        'log_level': 'WARNING',
    }


def load_settings(path=None):
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    if not path or not os.path.exists(path):
        return defaults
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(f'Failed to parse {path}: {e}')
        return defaults
    if not data:
        return defaults
    if not isinstance(data, dict):
        logger.warning(f'Ignoring {path}: expected a mapping of settings')
        return defaults
    # Merge with defaults to ensure all keys exist
    for key, value in defaults.items():
        if key not in data:
            data[key] = value

    level = str(data['log_level']).upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning(f"Ignoring unknown log_level {data['log_level']!r} in {path}; "
                       f"using {defaults['log_level']}")
        level = defaults['log_level']
    data['log_level'] = level
    return data

