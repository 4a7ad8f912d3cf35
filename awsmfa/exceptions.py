"""Exception types raised by awsmfa."""

from typing import Optional


class AwsMfaError(Exception):
    """Base class for every error awsmfa reports to the user."""


class InvalidModeError(AwsMfaError):
    def __init__(self, mode: str = ''):
        self.mode = mode
        super().__init__(
            'Invalid action mode: action mode should be "get-session-token" or "assume-role"'
            + (f' (got {mode!r})' if mode else '')
        )


class MissingParameterError(AwsMfaError):
    """A mandatory parameter could not be found in any source."""

    def __init__(self, parameter: str, hint: Optional[str] = None):
        self.parameter = parameter
        self.hint = hint
        message = f'no {parameter} specified'
        if hint:
            message = f'{message}. {hint}'
        super().__init__(message)


class StoreError(AwsMfaError):
    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'{reason}: {path}')


class ProfileNotConfiguredError(AwsMfaError):
    pass


class StsError(AwsMfaError):
    """STS rejected the request or boto3 could not build a client."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)
