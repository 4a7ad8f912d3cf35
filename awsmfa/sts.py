"""Calls to AWS STS for temporary credentials."""

import logging
from typing import Dict

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from . import __version__
from .exceptions import StsError

logger = logging.getLogger(__name__)

# Custom User-Agent suffix for AWS API calls
BOTO_CONFIG = Config(user_agent_extra=f'awsmfa/{__version__}')

# Errors worth asking for a new MFA code
RETRYABLE_ERROR_CODES = ('AccessDenied', 'InvalidIdentityToken')


def create_session(profile: str) -> boto3.Session:
    """Session for the before-MFA profile.

    boto3 resolves the long-term credentials itself, so environment
    variables take precedence over the shared files as usual.
    """
    try:
        return boto3.Session(profile_name=profile)
    except BotoCoreError as e:
        raise StsError(f"failed to load credentials: {e}") from e


def _client(session: boto3.Session, region: str):
    return session.client('sts', region_name=region, config=BOTO_CONFIG)


def _call(api: str, operation, **kwargs) -> Dict:
    try:
        response = operation(**kwargs)
    except ClientError as e:
        error_code = e.response['Error']['Code']
        logger.debug(f"ClientError: {error_code} - {e}")
        raise StsError(f"something occurred in calling AWS STS {api} API: {e}", code=error_code) from e
    except BotoCoreError as e:
        logger.debug(f"BotoCoreError calling {api}: {e}")
        raise StsError(f"something occurred in calling AWS STS {api} API: {e}") from e

    logger.debug(f"{api} succeeded, expires: {response['Credentials']['Expiration']}")
    return response['Credentials']


def get_session_token(session: boto3.Session, region: str, duration: int,
                      mfa_serial: str, token_code: str) -> Dict:
    """Get temporary session credentials using MFA."""
    logger.debug(f"Requesting session token: region={region}, mfa_serial={mfa_serial}, duration={duration}s")
    sts = _client(session, region)
    return _call('GetSessionToken', sts.get_session_token,
                 DurationSeconds=duration,
                 SerialNumber=mfa_serial,
                 TokenCode=token_code)


def assume_role(session: boto3.Session, region: str, role_arn: str, role_session_name: str,
                duration: int, mfa_serial: str, token_code: str) -> Dict:
    """Assume ``role_arn`` using MFA."""
    logger.debug(f"Assuming role {role_arn}: region={region}, session={role_session_name}, "
                 f"mfa_serial={mfa_serial}, duration={duration}s")
    sts = _client(session, region)
    return _call('AssumeRole', sts.assume_role,
                 RoleArn=role_arn,
                 RoleSessionName=role_session_name,
                 DurationSeconds=duration,
                 SerialNumber=mfa_serial,
                 TokenCode=token_code)
