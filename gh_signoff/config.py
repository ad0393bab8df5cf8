"""
Configuration loading for gh-signoff.

Implements cascading configuration:
1. Global defaults (~/.config/gh-signoff/config.yaml)
2. Project config (.signoff.yaml) - committed to repo
3. Local overrides (.signoff.local.yaml) - gitignored

Recognised keys:

    repo: owner/name          # default: the repository gh detects from the checkout
    logging:
      level: error            # debug | info | warning | error
      destinations: [file]    # file | stdout | stderr
      file: ~/.config/gh-signoff/signoff.log
"""
import re
import sys
from pathlib import Path
from typing import Optional

import yaml

from .logger import LEVELS

PROJECT_CONFIG_FILE = '.signoff.yaml'
LOCAL_CONFIG_FILE = '.signoff.local.yaml'
REPO_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$')
LOG_DESTINATIONS = {'file', 'stdout', 'stderr'}


def get_global_config_dir() -> Path:
    """Directory holding the global config and the default log file."""
    return Path.home() / '.config' / 'gh-signoff'


def load_yaml(path: Path) -> dict:
    """
    Load a YAML config file.

    Args:
        path: Path to config file

    Returns:
        Parsed mapping (empty dict if missing, empty or unparseable)
    """
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        print(f"⚠️ Could not load {path}: {e}", file=sys.stderr)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        print(f"⚠️ Config {path} must be a mapping, ignoring", file=sys.stderr)
        return {}
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge override into base dictionary.

    Recursively merges nested dictionaries. Non-dict values are replaced.

    Returns:
        Merged dictionary (same as base)
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class SignoffConfig:
    """
    Configuration manager for gh-signoff.

    Loads and merges configuration from global, project, and local sources.
    """

    def __init__(self, project_dir: str):
        self.project_dir = project_dir
        self.validation_errors: list[str] = []
        self._config = self._load_cascade()

    def _default_config(self) -> dict:
        return {
            'logging': {
                'level': 'error',
                'destinations': ['file'],
                'file': str(get_global_config_dir() / 'signoff.log'),
            },
        }

    def _load_cascade(self) -> dict:
        """
        Load configuration cascade: global → project → local.

        Invalid values are reported and dropped so defaults apply.
        """
        config = self._default_config()

        sources = [
            get_global_config_dir() / 'config.yaml',
            Path(self.project_dir) / PROJECT_CONFIG_FILE,
            Path(self.project_dir) / LOCAL_CONFIG_FILE,
        ]
        for source in sources:
            data = load_yaml(source)
            if data:
                deep_merge(config, data)

        self._validate(config)
        return config

    def _invalid(self, message: str) -> None:
        print(f"⚠️ Config validation error: {message}", file=sys.stderr)
        self.validation_errors.append(message)

    def _validate(self, config: dict) -> None:
        defaults = self._default_config()

        repo = config.get('repo')
        if repo is not None and not (isinstance(repo, str) and REPO_PATTERN.match(repo)):
            self._invalid(f"'repo' must look like owner/name, got {repo!r}")
            del config['repo']

        logging_config = config.get('logging')
        if not isinstance(logging_config, dict):
            self._invalid("'logging' must be a mapping")
            config['logging'] = defaults['logging']
            return

        level = logging_config.get('level')
        if not isinstance(level, str) or level.lower() not in LEVELS:
            allowed = ', '.join(LEVELS)
            self._invalid(f"'logging.level' must be one of: {allowed}")
            logging_config['level'] = defaults['logging']['level']

        destinations = logging_config.get('destinations')
        if isinstance(destinations, str):
            destinations = [destinations]
        if not isinstance(destinations, list) or not all(d in LOG_DESTINATIONS for d in destinations):
            allowed = ', '.join(sorted(LOG_DESTINATIONS))
            self._invalid(f"'logging.destinations' entries must be one of: {allowed}")
            destinations = defaults['logging']['destinations']
        logging_config['destinations'] = destinations

        log_file = logging_config.get('file')
        if not isinstance(log_file, str) or not log_file:
            self._invalid("'logging.file' must be a path")
            logging_config['file'] = defaults['logging']['file']
        else:
            logging_config['file'] = str(Path(log_file).expanduser())

    def get_validation_errors(self) -> list[str]:
        """Return any validation errors encountered while loading config."""
        return list(self.validation_errors)

    def get_repo(self) -> Optional[str]:
        """Explicit ``owner/name``, or None to let gh detect it."""
        return self._config.get('repo')

    def get_logging_config(self) -> dict:
        return dict(self._config.get('logging', {}))

    def get_raw_config(self) -> dict:
        return self._config.copy()
