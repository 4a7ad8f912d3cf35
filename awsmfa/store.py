"""Typed access to the INI files awsmfa reads and writes.

The shared credentials file, the shared config file and awsmfa's own
configuration file are all INI documents. Resolvers only ever need a
handful of operations on them, so ``ConfigStore`` exposes exactly those
and keeps ``configparser`` details out of the resolution logic.
"""

import configparser
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional, Union

from .exceptions import StoreError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def config_section_name(profile: str) -> str:
    """Section name of a profile inside the shared config file."""
    return f"profile {profile}" if profile != "default" else "default"


def new_parser() -> configparser.ConfigParser:
    # Trailing "# ..." comments are stripped, as in the generated skeletons
    return configparser.ConfigParser(interpolation=None, inline_comment_prefixes=('#', ';'))


class ConfigStore:
    """A loaded INI document, keyed by section then key."""

    def __init__(self, parser: Optional[configparser.ConfigParser] = None):
        if parser is None:
            parser = new_parser()
        self._parser = parser

    @classmethod
    def load(cls, path: PathLike) -> 'ConfigStore':
        """Read ``path`` from disk.

        Raises:
            StoreError: the file is missing, unreadable or not valid INI.
        """
        path = Path(path)
        parser = new_parser()
        try:
            with open(path, 'r', encoding='utf-8-sig') as f:
                parser.read_file(f, source=str(path))
        except OSError as e:
            raise StoreError(path, f'failed to load file ({e.strerror or e})') from e
        except UnicodeDecodeError as e:
            raise StoreError(path, f'failed to parse file ({e.reason} at byte {e.start})') from e
        except configparser.Error as e:
            raise StoreError(path, f'failed to parse file ({e.message})') from e
        logger.debug(f"Loaded {path} ({len(parser.sections())} sections)")
        return cls(parser)

    @classmethod
    def load_optional(cls, path: PathLike) -> Optional['ConfigStore']:
        """Like ``load`` but returns None when the file does not exist."""
        if not Path(path).exists():
            logger.debug(f"Optional file not found: {path}")
            return None
        return cls.load(path)

    def sections(self):
        return self._parser.sections()

    def has_section(self, section: str) -> bool:
        return self._parser.has_section(section)

    def has_key(self, section: str, key: str) -> bool:
        return self._parser.has_option(section, key)

    def get_string(self, section: str, key: str) -> str:
        """Value of ``key`` in ``section``, or an empty string if absent."""
        return self._parser.get(section, key, fallback='').strip()

    def get_int(self, section: str, key: str) -> Optional[int]:
        """Value of ``key`` parsed as an integer, or None if absent or invalid."""
        value = self.get_string(section, key)
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            logger.debug(f"[{section}] {key}={value!r} is not an integer, ignoring")
            return None

    def set_value(self, section: str, key: str, value: str):
        if not self._parser.has_section(section):
            self._parser.add_section(section)
        self._parser.set(section, key, value)

    def save(self, path: PathLike):
        """Write the document to ``path``.

        The content goes to a temporary file in the same directory first
        and then replaces ``path``, so readers never see a half-written file.
        """
        path = Path(path)
        try:
            tmp_fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}-")
        except OSError as e:
            raise StoreError(path, f'failed to save file ({e.strerror or e})') from e

        tmp_path = Path(tmp_name)
        try:
            # Owner read/write only (600)
            try:
                os.fchmod(tmp_fd, stat.S_IRUSR | stat.S_IWUSR)
            except (AttributeError, OSError) as e:
                logger.debug(f"Could not set permissions on {tmp_path}: {e}")
            with os.fdopen(tmp_fd, 'w', encoding='utf-8') as f:
                self._parser.write(f)
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StoreError(path, f'failed to save file ({e.strerror or e})') from e
        logger.debug(f"Saved {path}")
