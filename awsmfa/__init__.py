"""awsmfa - get temporary AWS credentials with MFA and keep them in the shared credentials file."""

__version__ = '1.0.0'
