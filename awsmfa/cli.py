"""awsmfa command line.

Gets temporary AWS credentials with MFA (GetSessionToken or AssumeRole)
for the '<profile>-before-mfa' profile and saves them as '<profile>' in
the shared credentials file.
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv

from . import __version__
from .defaults import (
    AWSMFA_CONFIG_FILE,
    MODE_ASSUME_ROLE,
    Defaults,
)
from .exceptions import AwsMfaError, MissingParameterError, ProfileNotConfiguredError, StoreError, StsError
from .output import (
    format_duration,
    print_error,
    print_info,
    print_success,
    print_warning,
    render_table,
    sec_to_hms,
    setup_logging,
)
from .params import RequestParams, resolve_mode, resolve_profile, resolve_request
from .skeleton import (
    generate_config_skeleton,
    generate_configuration_file,
    generate_credentials_skeleton,
)
from .store import ConfigStore, config_section_name
from .sts import RETRYABLE_ERROR_CODES, assume_role, create_session, get_session_token
from .token_cache import has_active_token, save_temporary_token

logger = logging.getLogger(__name__)

MFA_TOKEN_LENGTH = 6  # Standard MFA token length
MFA_MAX_ATTEMPTS = 3  # Maximum retry attempts for MFA authentication


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='awsmfa',
        description='A simple utility command to pass the multi factor authentication (MFA) of AWS account',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              Refresh the 'default' profile from 'default-before-mfa'
  %(prog)s --profile prod               Refresh 'prod' from 'prod-before-mfa'
  %(prog)s -p prod --role-arn ARN       Assume a role with MFA
  %(prog)s -p prod -d 3600 --force      1-hour token, even if the current one is still valid
  %(prog)s --generate-config-skeleton assume-role
        """
    )
    parser.add_argument(
        '-m', '--mode',
        default='',
        help="The action mode, get-session-token or assume-role. Turns to assume-role automatically "
             "if awsmfa_role_arn is set in the shared credentials/config file or --role-arn is given."
    )
    parser.add_argument(
        '-p', '--profile',
        default='',
        help="The profile to save the token as. Requires 'PROFILE-before-mfa' in the shared "
             "credentials/config files (default: 'default')"
    )
    parser.add_argument(
        '-d', '--duration-seconds',
        type=int,
        default=0,
        help='The duration of the temporary credentials in seconds (min 900). '
             'Defaults: GetSessionToken=43200 (12h), AssumeRole=3600 (1h)'
    )
    parser.add_argument(
        '--serial-number',
        default='',
        help='The serial number of the MFA device, either the ARN of a virtual device '
             '(arn:aws:iam::123456789012:mfa/user) or the serial number of a hardware device'
    )
    parser.add_argument(
        '-e', '--endpoint-region',
        default='',
        help='The region of the STS endpoint, such as ap-northeast-1 or us-east-1'
    )
    parser.add_argument(
        '-r', '--role-arn',
        default='',
        help='The ARN of the IAM role to assume. Turns the mode to assume-role'
    )
    parser.add_argument(
        '--role-session-name',
        default='',
        help='The session name logged to AWS CloudTrail (default: awsmfa-session)'
    )
    parser.add_argument(
        '-f', '--force',
        action='store_true',
        help='Refresh the temporary credentials even if they are still valid'
    )
    parser.add_argument(
        '-s', '--silent',
        action='store_true',
        help='Hide the source of request params'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode with verbose logging'
    )
    parser.add_argument(
        '--generate-credentials-skeleton',
        metavar='MODE',
        default='',
        help='Print a sample shared credentials file for get-session-token or assume-role'
    )
    parser.add_argument(
        '--generate-config-skeleton',
        metavar='MODE',
        default='',
        help='Print a sample shared config file for get-session-token or assume-role'
    )
    parser.add_argument(
        '--generate-configuration-file',
        action='store_true',
        help=f"Generate awsmfa's configuration file at {AWSMFA_CONFIG_FILE}"
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def check_profile_configured(before_mfa_profile: str, credentials: ConfigStore, config: ConfigStore,
                             defaults: Defaults):
    """The before-MFA profile must exist in both shared files."""
    if not credentials.has_section(before_mfa_profile):
        raise ProfileNotConfiguredError(
            f'The profile "{before_mfa_profile}" is not set to your credentials file. '
            f'Please add the profile to {defaults.credentials_file_path}. You can get a template of the '
            f"credentials file by using '--generate-credentials-skeleton get-session-token' or "
            f"'--generate-credentials-skeleton assume-role'"
        )
    if not config.has_section(config_section_name(before_mfa_profile)):
        raise ProfileNotConfiguredError(
            f'The profile "{before_mfa_profile}" is not set to your config file. '
            f'Please add the profile to {defaults.config_file_path}. You can get a template of the '
            f"config file by using '--generate-config-skeleton get-session-token' or "
            f"'--generate-config-skeleton assume-role'"
        )


def params_table(params: RequestParams, silent: bool) -> str:
    rows = [('Profile to exec MFA', params.before_mfa_profile, params.profile.source)]
    if params.role_arn is not None:
        rows.append(('Role arn to assume', params.role_arn.value, params.role_arn.source))
        rows.append(('Role session name', params.role_session_name.value, params.role_session_name.source))
    api_type = 'AWS STS AssumeRole' if params.mode.value == MODE_ASSUME_ROLE else 'AWS STS GetSessionToken'
    rows.extend([
        ('Duration of token', format_duration(params.duration_seconds.value), params.duration_seconds.source),
        ("MFA device's serial", params.mfa_serial.value, params.mfa_serial.source),
        ('Region', params.endpoint_region.value, params.endpoint_region.source),
        ('API Type', api_type, params.mode.source),
    ])

    if silent:
        return render_table(['Parameter', 'Value'], [(name, str(value)) for name, value, _ in rows])
    return render_table(['Parameter', 'Value', 'Source'],
                        [(name, str(value), str(source)) for name, value, source in rows])


def read_token_code(prompt: str, input_fn: Callable[[str], str] = input) -> str:
    """Prompt until a well-formed MFA code is entered."""
    while True:
        token_code = input_fn(prompt).strip()
        if not token_code:
            print_error("MFA token is required")
            continue
        if not token_code.isdigit() or len(token_code) != MFA_TOKEN_LENGTH:
            print_error(f"MFA token must be {MFA_TOKEN_LENGTH} digits")
            continue
        return token_code


def request_token(params: RequestParams, input_fn: Callable[[str], str] = input) -> Dict:
    """Ask for an MFA code and call STS, allowing a few attempts for rejected codes."""
    session = create_session(params.before_mfa_profile)

    for attempt in range(1, MFA_MAX_ATTEMPTS + 1):
        prompt = 'Input your MFA token code: '
        if attempt > 1:
            prompt = f'Retry MFA token code ({attempt}/{MFA_MAX_ATTEMPTS}): '
        token_code = read_token_code(prompt, input_fn)

        try:
            if params.mode.value == MODE_ASSUME_ROLE:
                return assume_role(session, params.endpoint_region.value, params.role_arn.value,
                                   params.role_session_name.value, params.duration_seconds.value,
                                   params.mfa_serial.value, token_code)
            return get_session_token(session, params.endpoint_region.value,
                                     params.duration_seconds.value, params.mfa_serial.value, token_code)
        except StsError as e:
            if e.code not in RETRYABLE_ERROR_CODES or attempt >= MFA_MAX_ATTEMPTS:
                raise
            print_warning(f"MFA authentication failed ({e.code}), please try again")


def run(args: argparse.Namespace, awsmfa_config_path: Optional[Path] = None,
        input_fn: Optional[Callable[[str], str]] = None) -> int:
    awsmfa_config_path = awsmfa_config_path or AWSMFA_CONFIG_FILE
    input_fn = input_fn or input

    # Skeletons are printed without touching any file
    if args.generate_credentials_skeleton:
        print(generate_credentials_skeleton(args.generate_credentials_skeleton), end='')
        return 0
    if args.generate_config_skeleton:
        print(generate_config_skeleton(args.generate_config_skeleton), end='')
        return 0
    if args.generate_configuration_file:
        path = generate_configuration_file(awsmfa_config_path)
        print_success(f"Successfully created awsmfa's configuration file at {path}")
        return 0

    try:
        awsmfa_config = ConfigStore.load_optional(awsmfa_config_path)
    except StoreError as e:
        print_warning(f"Ignoring awsmfa's configuration file. {e}")
        awsmfa_config = None
    if awsmfa_config is None:
        print_info(f"[Tips] There isn't an awsmfa configuration file. You can set some default values "
                   f"in {awsmfa_config_path}. To create it, use 'awsmfa --generate-configuration-file'")
    defaults = Defaults.load(awsmfa_config)

    credentials = ConfigStore.load(defaults.credentials_file_path)
    config = ConfigStore.load(defaults.config_file_path)

    profile = resolve_profile(args.profile, defaults.profile, awsmfa_config)
    before_mfa = defaults.before_mfa_profile(profile.value)
    check_profile_configured(before_mfa, credentials, config, defaults)
    logger.info(f"Profile: {before_mfa} -> {profile.value} (source: {profile.source})")

    if not args.force:
        active, expiration = has_active_token(profile.value, credentials)
        if active:
            remaining = int((expiration - datetime.now(timezone.utc)).total_seconds())
            hours, minutes, _ = sec_to_hms(max(remaining, 0))
            print_success(f"Your temporary token is still active. Expires at {expiration} "
                          f"({hours}h {minutes}m remaining)")
            return 0

    cli_mode = args.mode
    if not cli_mode and args.role_arn:
        cli_mode = MODE_ASSUME_ROLE
    mode = resolve_mode(cli_mode, defaults.mode, before_mfa, credentials, config, awsmfa_config)

    try:
        params = resolve_request(
            profile, mode, defaults, credentials, config, awsmfa_config,
            duration_seconds=args.duration_seconds,
            serial_number=args.serial_number,
            endpoint_region=args.endpoint_region,
            role_arn=args.role_arn,
            role_session_name=args.role_session_name,
        )
    except MissingParameterError as e:
        places = [str(defaults.credentials_file_path), str(defaults.config_file_path)]
        option = '--role-arn'
        if e.parameter == 'mfa_serial':
            places.append(str(awsmfa_config_path))
            option = '--serial-number'
        raise MissingParameterError(
            e.parameter, f"You can set it in {', '.join(places)} or {option}"
        ) from e

    print("Try to get temporary token with following params ...")
    print(params_table(params, args.silent))

    token = request_token(params, input_fn)
    save_temporary_token(token, profile.value, defaults.credentials_file_path)
    print_success(f"Success! New temporary credentials are saved as profile: {profile.value}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    # Load environment variables from .env file if present
    env_file = Path.cwd() / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    args = build_parser().parse_args(argv)

    setup_logging(debug=args.debug)
    logger.info("awsmfa started")
    logger.debug(f"Arguments: {vars(args)}")

    try:
        return run(args)
    except AwsMfaError as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print("")
        print_info("Cancelled.")
        return 130


if __name__ == '__main__':
    sys.exit(main())
