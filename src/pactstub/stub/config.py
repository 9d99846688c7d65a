"""
PactStub Configuration

Stub behaviour settings, loadable from a YAML file.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


@dataclass
class StubConfig:
    """Configuration for stub server behavior."""

    # Listener
    host: str = "127.0.0.1"
    port: int = 0  # 0 binds an ephemeral port
    startup_timeout: float = 5.0  # Seconds to wait for the listener to come up

    # Matching
    match_body: bool = True
    array_order_sensitive: bool = True
    allow_type_coercion: bool = False  # Treat "1" and 1 as equal in bodies

    # No-match behavior
    no_match_status: int = 500

    # Logging
    log_level: str = "info"

    # Admin API
    admin_enabled: bool = True
    admin_prefix: str = "/__pactstub__"

    # Pact broker
    broker_timeout: float = 30.0
    broker_username: Optional[str] = None
    broker_password: Optional[str] = None
    broker_token: Optional[str] = None

    def __post_init__(self):
        # No-match responses are always 5xx
        if not 500 <= int(self.no_match_status) <= 599:
            raise ValueError(f"no_match_status must be a 5xx status, got {self.no_match_status}")
        self.no_match_status = int(self.no_match_status)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'StubConfig':
        """Create config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> 'StubConfig':
        """
        Load config from a YAML file.

        The settings may sit at the top level or under a "stub" key.

        Args:
            yaml_path: Path to the YAML file

        Returns:
            StubConfig
        """
        with open(yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {yaml_path}, got {type(data).__name__}")

        if isinstance(data.get('stub'), dict):
            data = data['stub']

        return cls.from_dict(data)

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> 'StubConfig':
        """Fill unset broker credentials from PACT_BROKER_* environment variables."""
        env = os.environ if environ is None else environ
        if self.broker_username is None:
            self.broker_username = env.get('PACT_BROKER_USERNAME')
        if self.broker_password is None:
            self.broker_password = env.get('PACT_BROKER_PASSWORD')
        if self.broker_token is None:
            self.broker_token = env.get('PACT_BROKER_TOKEN')
        return self
