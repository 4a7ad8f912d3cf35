"""Console output and logging setup."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .defaults import AWSMFA_CONFIG_DIR

OUTPUT_DIR = AWSMFA_CONFIG_DIR / "output"

logger = logging.getLogger("awsmfa")


def setup_logging(debug: bool = False, output_dir: Optional[Path] = None) -> Optional[Path]:
    """Configure logging to file and optionally to console in debug mode.

    Returns the log file path, or None if the log directory cannot be created.
    """
    output_dir = output_dir or OUTPUT_DIR
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console handler - only in debug mode
    if debug:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logger.addHandler(console_handler)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.debug(f"Could not create log directory {output_dir}: {e}")
        return None

    log_file = output_dir / f"awsmfa_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
    logger.addHandler(file_handler)

    logger.debug(f"Logging initialized. Log file: {log_file}")
    return log_file


class Colors:
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_success(msg: str):
    print(f"{Colors.CYAN}{msg}{Colors.ENDC}")
    logger.info(f"SUCCESS: {msg}")


def print_error(msg: str):
    print(f"{Colors.RED}[ERROR]: {msg}{Colors.ENDC}", file=sys.stderr)
    logger.error(msg)


def print_warning(msg: str):
    print(f"{Colors.YELLOW}{msg}{Colors.ENDC}")
    logger.warning(msg)


def print_info(msg: str):
    print(f"{Colors.BLUE}{msg}{Colors.ENDC}")
    logger.info(msg)


def sec_to_hms(seconds: int) -> Tuple[int, int, int]:
    """Split seconds into (hours, minutes, seconds)."""
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return hours, minutes, secs


def format_duration(seconds: int) -> str:
    h, m, s = sec_to_hms(seconds)
    return f"{seconds} sec ({h}h {m}m {s}s)"


def render_table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render rows as a plain ASCII table."""
    widths = [len(h) for h in header]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    border = '+' + '+'.join('-' * (w + 2) for w in widths) + '+'

    def line(cells: Sequence[str]) -> str:
        return '|' + '|'.join(f" {cell:<{w}} " for cell, w in zip(cells, widths)) + '|'

    lines: List[str] = [border, line([h.upper() for h in header]), border]
    lines.extend(line(row) for row in rows)
    lines.append(border)
    return '\n'.join(lines)
