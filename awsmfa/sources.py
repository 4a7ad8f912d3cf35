"""Where a resolved request parameter came from."""

from enum import Enum


class ParameterSource(Enum):
    CLI_OPT = 'cli option'
    SHARED_CREDENTIALS = 'shared credentials file'
    SHARED_CREDENTIALS_BEFORE_MFA_PROFILE = 'shared credentials file (before-mfa profile)'
    SHARED_CREDENTIALS_AFTER_MFA_PROFILE = 'shared credentials file (after-mfa profile)'
    SHARED_CONFIG = 'shared config file'
    SHARED_CONFIG_BEFORE_MFA_PROFILE = 'shared config file (before-mfa profile)'
    SHARED_CONFIG_AFTER_MFA_PROFILE = 'shared config file (after-mfa profile)'
    AWSMFA_CONFIG = 'awsmfa configuration file'
    AWSMFA_BUILD_IN = 'awsmfa build in default'
    ENV_AWS_DEFAULT_REGION = 'env AWS_DEFAULT_REGION'
    ENV_AWS_REGION = 'env AWS_REGION'
    ENV_AWS_PROFILE = 'env AWS_PROFILE'

    def __str__(self) -> str:
        return self.value
