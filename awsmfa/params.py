"""Resolution of STS request parameters from layered configuration sources.

Every resolver walks a fixed priority chain and returns the first non-empty
value together with the ``ParameterSource`` it came from. Lookups are pure
reads: the stores passed in are never modified.

Unless stated otherwise ``profile`` is the *before-MFA* profile name, i.e.
the profile holding the long-term credentials and MFA metadata.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, NamedTuple, Optional

from .defaults import (
    DEFAULT_VALUE_SECTION,
    MODE_ASSUME_ROLE,
    VALID_MODES,
    Defaults,
)
from .exceptions import InvalidModeError, MissingParameterError
from .sources import ParameterSource
from .store import ConfigStore, config_section_name

logger = logging.getLogger(__name__)

ROLE_ARN_KEY = 'awsmfa_role_arn'

ENV_AWS_PROFILE = 'AWS_PROFILE'
ENV_AWS_REGION = 'AWS_REGION'
ENV_AWS_DEFAULT_REGION = 'AWS_DEFAULT_REGION'


class Resolved(NamedTuple):
    value: object
    source: ParameterSource


def _resolved(name: str, value, source: ParameterSource) -> Resolved:
    logger.debug(f"{name}={value!r} (source: {source})")
    return Resolved(value, source)


def _from_shared_files(key: str, profile: str, credentials: ConfigStore,
                       config: ConfigStore) -> Optional[Resolved]:
    """Look ``key`` up in the credentials file, then in the config file."""
    value = credentials.get_string(profile, key)
    if value:
        return Resolved(value, ParameterSource.SHARED_CREDENTIALS)
    value = config.get_string(config_section_name(profile), key)
    if value:
        return Resolved(value, ParameterSource.SHARED_CONFIG)
    return None


def _from_awsmfa_config(key: str, awsmfa_config: Optional[ConfigStore]) -> str:
    if awsmfa_config is None:
        return ''
    return awsmfa_config.get_string(DEFAULT_VALUE_SECTION, key)


def resolve_mode(cli_opt: str, default: str, profile: str, credentials: ConfigStore,
                 config: ConfigStore, awsmfa_config: Optional[ConfigStore]) -> Resolved:
    """Resolve the action mode.

    Priority:
        1. cli option ``--mode``
        2. ``awsmfa_role_arn`` present in the profile (credentials, then config)
        3. awsmfa configuration file ``[default-value] mode``
        4. built-in default

    Raises:
        InvalidModeError: the cli option, or the built-in default reached at
            the end of the chain, is neither 'get-session-token' nor 'assume-role'.
    """
    if cli_opt in VALID_MODES:
        return _resolved('mode', cli_opt, ParameterSource.CLI_OPT)
    if cli_opt:
        raise InvalidModeError(cli_opt)

    if credentials.has_key(profile, ROLE_ARN_KEY):
        return _resolved('mode', MODE_ASSUME_ROLE, ParameterSource.SHARED_CREDENTIALS)
    if config.has_key(config_section_name(profile), ROLE_ARN_KEY):
        return _resolved('mode', MODE_ASSUME_ROLE, ParameterSource.SHARED_CONFIG)

    value = _from_awsmfa_config('mode', awsmfa_config)
    if value in VALID_MODES:
        return _resolved('mode', value, ParameterSource.AWSMFA_CONFIG)
    if value:
        logger.debug(f"Ignoring invalid mode {value!r} in awsmfa configuration file")

    if default in VALID_MODES:
        return _resolved('mode', default, ParameterSource.AWSMFA_BUILD_IN)
    raise InvalidModeError(default)


def resolve_profile(cli_opt: str, default: str, awsmfa_config: Optional[ConfigStore],
                    environ: Optional[Mapping[str, str]] = None) -> Resolved:
    """Resolve the bare profile name.

    Priority: cli option, ``AWS_PROFILE``, awsmfa configuration file, built-in.
    """
    if environ is None:
        environ = os.environ

    if cli_opt:
        return _resolved('profile', cli_opt, ParameterSource.CLI_OPT)
    env = environ.get(ENV_AWS_PROFILE, '')
    if env:
        return _resolved('profile', env, ParameterSource.ENV_AWS_PROFILE)
    value = _from_awsmfa_config('profile', awsmfa_config)
    if value:
        return _resolved('profile', value, ParameterSource.AWSMFA_CONFIG)
    return _resolved('profile', default, ParameterSource.AWSMFA_BUILD_IN)


def resolve_duration_seconds(cli_opt: int, default: int, profile: str, credentials: ConfigStore,
                             config: ConfigStore, awsmfa_config: Optional[ConfigStore]) -> Resolved:
    """Resolve the token duration in seconds.

    A cli value of 0 means "not given". Values that do not parse as integers
    are skipped.
    """
    if cli_opt:
        return _resolved('duration_seconds', cli_opt, ParameterSource.CLI_OPT)

    value = credentials.get_int(profile, 'duration_seconds')
    if value is not None:
        return _resolved('duration_seconds', value, ParameterSource.SHARED_CREDENTIALS)
    value = config.get_int(config_section_name(profile), 'duration_seconds')
    if value is not None:
        return _resolved('duration_seconds', value, ParameterSource.SHARED_CONFIG)

    if awsmfa_config is not None:
        value = awsmfa_config.get_int(DEFAULT_VALUE_SECTION, 'duration_seconds')
        if value is not None:
            return _resolved('duration_seconds', value, ParameterSource.AWSMFA_CONFIG)

    return _resolved('duration_seconds', default, ParameterSource.AWSMFA_BUILD_IN)


def resolve_mfa_serial(cli_opt: str, profile: str, credentials: ConfigStore,
                       config: ConfigStore, awsmfa_config: Optional[ConfigStore]) -> Resolved:
    """Resolve the MFA device serial number (ARN of a virtual device or hardware serial).

    Raises:
        MissingParameterError: no source has a serial number.
    """
    if cli_opt:
        return _resolved('mfa_serial', cli_opt, ParameterSource.CLI_OPT)

    found = _from_shared_files('mfa_serial', profile, credentials, config)
    if found:
        return _resolved('mfa_serial', *found)

    value = _from_awsmfa_config('mfa_serial', awsmfa_config)
    if value:
        return _resolved('mfa_serial', value, ParameterSource.AWSMFA_CONFIG)

    raise MissingParameterError('mfa_serial')


def resolve_role_arn(cli_opt: str, profile: str, credentials: ConfigStore,
                     config: ConfigStore) -> Resolved:
    """Resolve the ARN of the role to assume.

    Only the custom ``awsmfa_role_arn`` key is read. The SDK's own ``role_arn``
    is left alone so it does not trigger the SDK's role chaining.

    Raises:
        MissingParameterError: no source has a role ARN.
    """
    if cli_opt:
        return _resolved('role_arn', cli_opt, ParameterSource.CLI_OPT)

    found = _from_shared_files(ROLE_ARN_KEY, profile, credentials, config)
    if found:
        return _resolved('role_arn', *found)

    raise MissingParameterError(ROLE_ARN_KEY)


def resolve_role_session_name(cli_opt: str, default: str, profile: str, credentials: ConfigStore,
                              config: ConfigStore, awsmfa_config: Optional[ConfigStore]) -> Resolved:
    if cli_opt:
        return _resolved('role_session_name', cli_opt, ParameterSource.CLI_OPT)

    found = _from_shared_files('role_session_name', profile, credentials, config)
    if found:
        return _resolved('role_session_name', *found)

    value = _from_awsmfa_config('role_session_name', awsmfa_config)
    if value:
        return _resolved('role_session_name', value, ParameterSource.AWSMFA_CONFIG)
    return _resolved('role_session_name', default, ParameterSource.AWSMFA_BUILD_IN)


def resolve_endpoint_region(cli_opt: str, default: str, profile: str, before_mfa_suffix: str,
                            credentials: ConfigStore, config: ConfigStore,
                            awsmfa_config: Optional[ConfigStore],
                            environ: Optional[Mapping[str, str]] = None) -> Resolved:
    """Resolve the region of the STS endpoint.

    Unlike the other resolvers ``profile`` is the *bare* profile name; both
    the before-MFA and the after-MFA sections are consulted.

    Priority:
        1. cli option ``--endpoint-region``
        2. ``AWS_REGION``
        3. ``AWS_DEFAULT_REGION``
        4. before-MFA profile in the credentials file
        5. before-MFA profile in the config file
        6. profile in the credentials file
        7. profile in the config file
        8. awsmfa configuration file ``[default-value] endpoint_region``
        9. built-in default
    """
    if environ is None:
        environ = os.environ

    if cli_opt:
        return _resolved('endpoint_region', cli_opt, ParameterSource.CLI_OPT)

    for var, source in ((ENV_AWS_REGION, ParameterSource.ENV_AWS_REGION),
                        (ENV_AWS_DEFAULT_REGION, ParameterSource.ENV_AWS_DEFAULT_REGION)):
        env = environ.get(var, '')
        if env:
            return _resolved('endpoint_region', env, source)

    before_mfa = f"{profile}{before_mfa_suffix}"
    lookups = (
        (credentials, before_mfa, ParameterSource.SHARED_CREDENTIALS_BEFORE_MFA_PROFILE),
        (config, config_section_name(before_mfa), ParameterSource.SHARED_CONFIG_BEFORE_MFA_PROFILE),
        (credentials, profile, ParameterSource.SHARED_CREDENTIALS_AFTER_MFA_PROFILE),
        (config, config_section_name(profile), ParameterSource.SHARED_CONFIG_AFTER_MFA_PROFILE),
    )
    for store, section, source in lookups:
        value = store.get_string(section, 'region')
        if value:
            return _resolved('endpoint_region', value, source)

    value = _from_awsmfa_config('endpoint_region', awsmfa_config)
    if value:
        return _resolved('endpoint_region', value, ParameterSource.AWSMFA_CONFIG)
    return _resolved('endpoint_region', default, ParameterSource.AWSMFA_BUILD_IN)


@dataclass(frozen=True)
class RequestParams:
    """Everything needed for one STS call, each value with its provenance."""
    profile: Resolved
    before_mfa_profile: str
    mode: Resolved
    duration_seconds: Resolved
    mfa_serial: Resolved
    endpoint_region: Resolved
    role_arn: Optional[Resolved] = None
    role_session_name: Optional[Resolved] = None


def resolve_request(profile: Resolved, mode: Resolved, defaults: Defaults,
                    credentials: ConfigStore, config: ConfigStore,
                    awsmfa_config: Optional[ConfigStore], *,
                    duration_seconds: int = 0, serial_number: str = '',
                    endpoint_region: str = '', role_arn: str = '',
                    role_session_name: str = '',
                    environ: Optional[Mapping[str, str]] = None) -> RequestParams:
    """Resolve the remaining parameters for the given mode.

    The role ARN and role session name are only resolved for assume-role.
    """
    before_mfa = defaults.before_mfa_profile(profile.value)

    duration = resolve_duration_seconds(duration_seconds, defaults.duration_seconds(mode.value),
                                        before_mfa, credentials, config, awsmfa_config)
    serial = resolve_mfa_serial(serial_number, before_mfa, credentials, config, awsmfa_config)
    region = resolve_endpoint_region(endpoint_region, defaults.endpoint_region, profile.value,
                                     defaults.before_mfa_suffix, credentials, config,
                                     awsmfa_config, environ=environ)

    arn = session_name = None
    if mode.value == MODE_ASSUME_ROLE:
        arn = resolve_role_arn(role_arn, before_mfa, credentials, config)
        session_name = resolve_role_session_name(role_session_name, defaults.role_session_name,
                                                 before_mfa, credentials, config, awsmfa_config)

    return RequestParams(
        profile=profile,
        before_mfa_profile=before_mfa,
        mode=mode,
        duration_seconds=duration,
        mfa_serial=serial,
        endpoint_region=region,
        role_arn=arn,
        role_session_name=session_name,
    )
