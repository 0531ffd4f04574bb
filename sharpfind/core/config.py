# core/config.py

"""Configuration management."""
import json
import sys
from pathlib import Path
from typing import FrozenSet, Optional

from sharpfind.core.data_structures import DEFAULT_HIDDEN_DIRS
from sharpfind.utils.i18n import translator as t

DEFAULT_HEAD_LIMIT = 10


class Config:
    """User configuration loaded from a JSON file."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else Path.home() / '.sharpfind_config.json'
        self.default_config = {
            'language': None,
            'head_limit': DEFAULT_HEAD_LIMIT,
            'hidden_dirs': sorted(DEFAULT_HIDDEN_DIRS),
            'use_index': False,
            'follow_symlinks': False,
        }
        self.config = self.load_config()

    def load_config(self) -> dict:
        """Load configuration from file, merged over the defaults."""
        config = self.default_config.copy()
        if not self.config_file.exists():
            return config
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                raise ValueError("top-level value must be an object")
        except (OSError, ValueError) as e:
            self._warn(t.get('config_load_failed', self.config_file, e))
            return config
        config.update(loaded)

        hidden_dirs = config.get('hidden_dirs')
        if not isinstance(hidden_dirs, list) or not all(isinstance(d, str) for d in hidden_dirs):
            self._warn(t.get('config_invalid_list', 'hidden_dirs'))
            config['hidden_dirs'] = self.default_config['hidden_dirs']
        return config

    @staticmethod
    def _warn(message: str):
        print(f"{t.get('warning_prefix')} {message}", file=sys.stderr)

    def get(self, key: str, default=None):
        """Get configuration value."""
        return self.config.get(key, default)

    @property
    def head_limit(self) -> Optional[int]:
        """Default result limit; None or a non-positive value means unlimited."""
        value = self.config.get('head_limit')
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        return None

    @property
    def hidden_dirs(self) -> FrozenSet[str]:
        return frozenset(self.config['hidden_dirs'])
