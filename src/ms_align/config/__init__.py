from .config_loader import (
    ConfigLoader,
    DEFAULT_CONFIG_PATH,
    deep_merge,
    load_config
)

__all__ = [
    'ConfigLoader',
    'DEFAULT_CONFIG_PATH',
    'deep_merge',
    'load_config',
]
