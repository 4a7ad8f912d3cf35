"""Cached temporary credentials: expiry checks and saving new tokens."""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from .store import ConfigStore, PathLike

logger = logging.getLogger(__name__)

# RFC 3339, always written in UTC
EXPIRATION_WRITE_FORMAT = '%Y-%m-%dT%H:%M:%SZ'
EXPIRATION_READ_FORMAT = '%Y-%m-%dT%H:%M:%S%z'


def format_expiration(expiration: datetime) -> str:
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    return expiration.astimezone(timezone.utc).strftime(EXPIRATION_WRITE_FORMAT)


def parse_expiration(value: str) -> Optional[datetime]:
    """Parse a stored expiration, returning None if it is not a valid timestamp."""
    try:
        return datetime.strptime(value.strip(), EXPIRATION_READ_FORMAT).astimezone(timezone.utc)
    except ValueError as e:
        logger.debug(f"Failed to parse expiration {value!r}: {e}")
        return None


def is_expired(expiration: datetime, now: datetime) -> bool:
    """A token expiring exactly at ``now`` is still valid."""
    return now > expiration


def has_active_token(profile: str, credentials: ConfigStore,
                     now: Optional[datetime] = None) -> Tuple[bool, Optional[datetime]]:
    """Check whether ``profile`` holds a temporary token that has not expired yet.

    Args:
        profile: The bare profile name the temporary credentials are saved under
        credentials: The loaded shared credentials file
        now: Point in time to compare against (defaults to the current UTC time)

    Only checks the local expiration timestamp - no AWS API calls.

    Returns:
        Tuple of (is_active, expiration)
        - (True, datetime) - token valid until datetime
        - (False, None) - no section, no expiration, unparsable or expired
    """
    if not credentials.has_section(profile) or not credentials.has_key(profile, 'expiration'):
        logger.debug(f"No expiration found for {profile}")
        return False, None

    expiration = parse_expiration(credentials.get_string(profile, 'expiration'))
    if expiration is None:
        return False, None

    if now is None:
        now = datetime.now(timezone.utc)
    if is_expired(expiration, now):
        logger.debug(f"Token expired at {expiration}")
        return False, None

    logger.debug(f"Token valid until {expiration}")
    return True, expiration


def save_temporary_token(credentials_data: Dict, profile: str, credentials_file_path: PathLike):
    """Save temporary credentials from STS to the shared credentials file.

    Args:
        credentials_data: The ``Credentials`` mapping of a GetSessionToken or
            AssumeRole response
        profile: The bare profile name (e.g., 'prod', not 'prod-before-mfa')
        credentials_file_path: The shared credentials file

    The file is read again right before writing so edits made since startup
    are kept. Other keys in the section, and all other sections, are left
    untouched. Without locking, a concurrent writer can still be overwritten.

    Raises:
        StoreError: the file cannot be read or written.
    """
    credentials = ConfigStore.load(credentials_file_path)

    credentials.set_value(profile, 'aws_access_key_id', credentials_data['AccessKeyId'])
    credentials.set_value(profile, 'aws_secret_access_key', credentials_data['SecretAccessKey'])
    credentials.set_value(profile, 'aws_session_token', credentials_data['SessionToken'])
    credentials.set_value(profile, 'expiration', format_expiration(credentials_data['Expiration']))

    credentials.save(credentials_file_path)
    logger.info(f"Saved temporary credentials for profile {profile} "
                f"(key {credentials_data['AccessKeyId'][:8]}..., expires {format_expiration(credentials_data['Expiration'])})")
