"""Built-in defaults and their overrides from awsmfa's configuration file."""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .store import ConfigStore

logger = logging.getLogger(__name__)

AWSMFA_CONFIG_DIR = Path.home() / ".awsmfa"
AWSMFA_CONFIG_FILE = AWSMFA_CONFIG_DIR / "configuration"

MODE_GET_SESSION_TOKEN = 'get-session-token'
MODE_ASSUME_ROLE = 'assume-role'
VALID_MODES = (MODE_GET_SESSION_TOKEN, MODE_ASSUME_ROLE)

FILEPATH_SECTION = 'filepath'
DEFAULT_VALUE_SECTION = 'default-value'


@dataclass(frozen=True)
class Defaults:
    """Values used when no other source supplies a parameter.

    Built once at startup and passed to every resolver; never mutated.
    """
    credentials_file_path: Path = Path.home() / ".aws" / "credentials"
    config_file_path: Path = Path.home() / ".aws" / "config"
    before_mfa_suffix: str = '-before-mfa'
    mode: str = MODE_GET_SESSION_TOKEN
    profile: str = 'default'
    endpoint_region: str = 'aws-global'
    duration_seconds_get_session_token: int = 43200  # 12 hours
    duration_seconds_assume_role: int = 3600  # 1 hour
    role_session_name: str = 'awsmfa-session'

    def before_mfa_profile(self, profile: str) -> str:
        return f"{profile}{self.before_mfa_suffix}"

    def duration_seconds(self, mode: str) -> int:
        if mode == MODE_ASSUME_ROLE:
            return self.duration_seconds_assume_role
        return self.duration_seconds_get_session_token

    @classmethod
    def load(cls, awsmfa_config: Optional[ConfigStore]) -> 'Defaults':
        """Merge overrides from awsmfa's configuration file into the built-ins.

        Only file locations, the before-MFA suffix and the per-mode durations
        are merged here. The other ``[default-value]`` keys are a separate
        source for the resolvers so they keep their own provenance.
        """
        defaults = cls()
        if awsmfa_config is None:
            return defaults

        overrides = {}
        for key in ('credentials_file_path', 'config_file_path'):
            value = awsmfa_config.get_string(FILEPATH_SECTION, key)
            if value:
                overrides[key] = Path(os.path.expanduser(os.path.expandvars(value)))

        suffix = awsmfa_config.get_string(DEFAULT_VALUE_SECTION, 'suffix_of_before_mfa_profile')
        if suffix:
            overrides['before_mfa_suffix'] = suffix

        for key in ('duration_seconds_get_session_token', 'duration_seconds_assume_role'):
            value = awsmfa_config.get_int(DEFAULT_VALUE_SECTION, key)
            if value:
                overrides[key] = value

        if overrides:
            logger.debug(f"Overriding built-in defaults: {sorted(overrides)}")
        return replace(defaults, **overrides)
