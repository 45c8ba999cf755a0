"""
File Storage Value Objects

Key generation and key parsing for uploaded files.

Primary keys have the shape ``<epoch-ms>-<random>-<sanitized filename>`` so they
stay unique without coordination while remaining readable in bucket listings.
Short keys are fixed-length alphanumeric aliases used in shareable links.
"""

import mimetypes
import re
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

KEY_SEPARATOR = "-"
PRIMARY_KEY_RANDOM_LENGTH = 8
SHORT_KEY_LENGTH = 8
MAX_KEY_FILENAME_LENGTH = 100
SHORT_KEY_ALPHABET = string.ascii_letters + string.digits
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")
_SHORT_KEY_PATTERN = re.compile(rf"^[A-Za-z0-9]{{{SHORT_KEY_LENGTH}}}$")


class InvalidShortKeyError(ValueError):
    """Raised when a short key does not have the expected shape."""
    pass


def sanitize_filename(filename: str) -> str:
    """Replace every character outside ``[A-Za-z0-9.-]`` with an underscore."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def shorten_filename(filename: str, limit: int = MAX_KEY_FILENAME_LENGTH) -> str:
    """
    Truncate a sanitized filename to ``limit`` characters, keeping a short extension.

    Keys end up as single path segments in blob stores, so the filename part
    must stay well below common 255-byte filesystem name limits.
    """
    if len(filename) <= limit:
        return filename

    stem, dot, extension = filename.rpartition(".")
    suffix = dot + extension if stem and len(extension) < limit // 4 else ""
    return filename[: limit - len(suffix)] + suffix


def generate_primary_key(filename: str, now_ms: Optional[int] = None) -> str:
    """
    Generate a collision-resistant storage key for an upload.

    Args:
        filename: Original filename supplied by the uploader
        now_ms: Timestamp in milliseconds (defaults to the current time)

    Returns:
        Key of the form ``<timestamp>-<random>-<sanitized filename>``, the
        filename part capped at MAX_KEY_FILENAME_LENGTH characters
    """
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    random_part = "".join(
        secrets.choice(_BASE36_ALPHABET) for _ in range(PRIMARY_KEY_RANDOM_LENGTH)
    )
    return KEY_SEPARATOR.join(
        [str(timestamp), random_part, shorten_filename(sanitize_filename(filename))]
    )


def extract_original_filename(key: str) -> str:
    """
    Recover the filename portion of a primary key.

    Drops the timestamp and random segments; filenames that contain the
    separator themselves are rejoined intact.
    """
    parts = key.split(KEY_SEPARATOR)
    if len(parts) >= 3:
        return KEY_SEPARATOR.join(parts[2:])
    return key


def looks_like_short_key(identifier: str) -> bool:
    """Check whether an identifier has the shape of a short key."""
    return bool(identifier) and _SHORT_KEY_PATTERN.match(identifier) is not None


def guess_content_type(filename: str) -> str:
    """Best-effort content type from the filename extension."""
    content_type, _ = mimetypes.guess_type(filename or "")
    return content_type or DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class ShortKey:
    """
    Value object representing a short shareable alias.

    8 characters drawn uniformly from a 62-symbol alphabet (about 47.6 bits).
    Uniqueness is not checked against the metadata store.
    """
    value: str

    def __post_init__(self):
        if not looks_like_short_key(self.value):
            raise InvalidShortKeyError(
                f"Invalid short key: expected {SHORT_KEY_LENGTH} alphanumeric "
                f"characters, got {self.value!r}"
            )

    @classmethod
    def generate(cls) -> "ShortKey":
        """Generate a new random short key."""
        return cls(
            "".join(secrets.choice(SHORT_KEY_ALPHABET) for _ in range(SHORT_KEY_LENGTH))
        )

    def __str__(self) -> str:
        return self.value


def generate_short_key() -> str:
    """Generate a new short key string."""
    return str(ShortKey.generate())
