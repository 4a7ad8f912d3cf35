"""Templates for the shared credentials/config files and awsmfa's configuration file."""

import logging
from pathlib import Path

from .defaults import MODE_ASSUME_ROLE, MODE_GET_SESSION_TOKEN
from .exceptions import InvalidModeError, StoreError
from .store import PathLike

logger = logging.getLogger(__name__)

CREDENTIALS_SKELETON = """[sample-before-mfa]
aws_access_key_id     = YOUR_ACCESS_KEY_ID_HERE!!!
aws_secret_access_key = YOUR_SECRET_ACCESS_KEY_HERE!!!
"""

CONFIG_SKELETONS = {
    MODE_GET_SESSION_TOKEN: """[profile sample-before-mfa]
region     = REGION_TO_CONNECT_IN_EXECUTING_STS_GET_SESSION_TOKEN # Such as ap-northeast-1, us-east-1
output     = json
mfa_serial = YOUR_MFA_SERIAL_HERE!!! # Such as arn:aws:iam::XXXXXXXXXXX:mfa/YYYY

[profile sample]
region = REGION_TO_CONNECT_AFTER_MFA # Such as ap-northeast-1, us-east-1
output = json

# To switch role with the temporary credentials, uncomment the section below.
# [profile switched-role]
# region         = REGION_TO_CONNECT_AFTER_ASSUMED_ROLE # Such as ap-northeast-1, us-east-1
# output         = json
# role_arn       = YOUR_ROLE_TO_ASSUME_HERE!!! # Such as arn:aws:iam::XXXXXXXXXXX:role/ZZZZ
# source_profile = sample
""",
    MODE_ASSUME_ROLE: """[profile sample-before-mfa]
region          = REGION_TO_CONNECT_IN_EXECUTING_STS_ASSUME_ROLE # Such as ap-northeast-1, us-east-1
output          = json
mfa_serial      = YOUR_MFA_SERIAL_HERE!!! # Such as arn:aws:iam::XXXXXXXXXXX:mfa/YYYY
awsmfa_role_arn = YOUR_ROLE_TO_ASSUME_HERE!!! # Such as arn:aws:iam::XXXXXXXXXXX:role/ZZZZ

[profile sample]
region = REGION_TO_CONNECT_AFTER_MFA # Such as ap-northeast-1, us-east-1
output = json
""",
}

CONFIGURATION_TEMPLATE = """[filepath]
credentials_file_path = ${HOME}/.aws/credentials
config_file_path      = ${HOME}/.aws/config

[default-value]
suffix_of_before_mfa_profile       = -before-mfa
mode                               = get-session-token
profile                            = default
# mfa_serial                       = YOUR_SERIAL_HERE!!!
endpoint_region                    = aws-global
duration_seconds_get_session_token = 43200
duration_seconds_assume_role       = 3600
role_session_name                  = awsmfa-session
"""


def generate_credentials_skeleton(mode: str) -> str:
    """Sample shared credentials file for ``mode``.

    Both modes need the same long-term keys; the mode is still validated.
    """
    if mode not in (MODE_GET_SESSION_TOKEN, MODE_ASSUME_ROLE):
        raise InvalidModeError(mode)
    return CREDENTIALS_SKELETON


def generate_config_skeleton(mode: str) -> str:
    try:
        return CONFIG_SKELETONS[mode]
    except KeyError:
        raise InvalidModeError(mode) from None


def generate_configuration_file(path: PathLike) -> Path:
    """Write awsmfa's configuration file template to ``path``.

    Raises:
        StoreError: the file already exists or cannot be written.
    """
    path = Path(path)
    if path.exists():
        raise StoreError(path, 'The file already exists')

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(CONFIGURATION_TEMPLATE)
    except OSError as e:
        raise StoreError(path, f'failed to create file ({e.strerror or e})') from e

    logger.info(f"Created awsmfa configuration file at {path}")
    return path
