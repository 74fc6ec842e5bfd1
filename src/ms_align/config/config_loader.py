"""
Configuration loader for ms-align.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default_config.yaml"

def deep_merge(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a copy of base with overrides merged in, section by section."""
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged

class ConfigLoader:
    """Loads and manages configuration from YAML files."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config = {}
        self.load_config()

    def load_config(self):
        """Load the packaged defaults, then the user file on top of them."""
        try:
            with open(DEFAULT_CONFIG_PATH, 'r') as f:
                defaults = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read packaged defaults {DEFAULT_CONFIG_PATH}: {e}. Using built-in defaults.")
            defaults = self._get_default_config()

        if self.config_path is None:
            self.config = defaults
            self.config['_source'] = str(DEFAULT_CONFIG_PATH)
            return

        path = Path(self.config_path)
        with open(path, 'r') as f:
            user_config = yaml.safe_load(f) or {}

        if not isinstance(user_config, dict):
            raise ValueError(f"Invalid YAML format in {path}")

        self.config = deep_merge(defaults, user_config)
        self.config['_source'] = str(path.resolve())

    def _get_default_config(self) -> Dict[str, Any]:
        """Return default configuration if the packaged YAML file is unreadable."""
        return {
            'index': {
                'k': 31,
                'add_revcomp': False
            },
            'translate': {
                'max_error_prob': 1e-7,
                'gap_length_cutoff': 29
            },
            'mapping': {
                'both_strands': False
            },
            'performance': {
                'num_workers': 1,
                'use_multiprocessing': True
            },
            'io': {
                'reference_files': [],
                'query_files': [],
                'index_path': None,
                'output_file': None,
                'output_dir': 'Results',
                'logs_dir': 'Logs'
            },
            'debug': {
                'log_level': 'INFO',
                'verbose': False,
                'save_symbols': False
            },
            'validation': {
                'validate_inputs': True
            }
        }

    def apply_overrides(self, overrides: Optional[Dict[str, Any]]):
        """Merge nested override dicts (e.g. from the command line)."""
        source = self.config.get('_source')
        self.config = deep_merge(self.config, overrides)
        if source is not None:
            self.config['_source'] = source

def load_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Load configuration as a plain dict. Fails if a given file does not exist."""
    loader = ConfigLoader(config_path)
    loader.apply_overrides(overrides)
    return loader.config

__all__ = [
    'ConfigLoader',
    'DEFAULT_CONFIG_PATH',
    'deep_merge',
    'load_config',
]
