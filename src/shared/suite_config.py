"""Suite configuration: YAML settings, .env loading and test credentials.

Settings live in ``config/suite.yaml``; secrets only ever come from the
environment (or a local ``.env`` file) and are never written to YAML.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

__all__ = [
    'CONFIG_ENV_VAR',
    'CONFIG_PATH',
    'Credentials',
    'get_section',
    'load_environment',
    'load_suite_config',
]

CONFIG_PATH = Path(__file__).resolve().parents[2] / 'config' / 'suite.yaml'

# Lets `run.py --e2e --config ...` reach the pytest session
CONFIG_ENV_VAR = 'SUITE_CONFIG'


def load_environment(dotenv_path: Optional[Union[str, Path]] = None) -> bool:
    """Load ``.env`` into the process environment without overriding set variables.

    Returns:
        True if a .env file was found and loaded
    """
    return load_dotenv(dotenv_path=dotenv_path, override=False)


def load_suite_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load suite configuration from YAML.

    Args:
        path: YAML file (default: $SUITE_CONFIG, then config/suite.yaml)

    Returns:
        Configuration dict, empty dict if the file is missing or invalid
    """
    config_path = Path(path or os.getenv(CONFIG_ENV_VAR) or CONFIG_PATH)
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        logging.warning(f"[config] {config_path} not found, using defaults")
        return {}
    except (OSError, yaml.YAMLError) as e:
        logging.warning(f"[config] Failed to load {config_path}: {e}")
        return {}

    if not isinstance(config, dict):
        logging.warning(f"[config] {config_path} does not contain a mapping, using defaults")
        return {}
    return config


def get_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return ``config[name]`` if it is a mapping, else an empty dict."""
    section = config.get(name) or {}
    return section if isinstance(section, dict) else {}


@dataclass(frozen=True)
class Credentials:
    """Test account used for form logins."""
    email: str = ""
    password: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.email and self.password)

    @property
    def redacted_email(self) -> str:
        """E-mail safe for logs: first character and domain only."""
        if '@' not in self.email:
            return '****'
        local, domain = self.email.split('@', 1)
        return f"{local[:1]}***@{domain}"

    def __repr__(self) -> str:
        return f"Credentials(email={self.redacted_email!r}, password='****')"

    @classmethod
    def from_env(cls) -> "Credentials":
        """Create credentials from TEST_USER_EMAIL and TEST_USER_PASSWORD"""
        return cls(
            email=os.getenv("TEST_USER_EMAIL", "").strip(),
            password=os.getenv("TEST_USER_PASSWORD", ""),
        )
