"""
Transfer Configuration

Upload and download policy settings for the transfer service.
"""

import os
from typing import Optional

BYTES_PER_MB = 1024 * 1024
DEFAULT_MAX_UPLOAD_MB = 100


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


def _env_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value in (None, ""):
        return None
    return float(value)


class TransferConfig:
    """
    Transfer policy settings.

    Attributes:
        max_upload_bytes: Largest accepted upload
        one_time_downloads: Whether downloads delete the file unless asked otherwise
        short_links_enabled: Whether ingest assigns a short key
        default_expires_in_hours: Expiration applied when an upload names none
    """

    def __init__(
        self,
        max_upload_bytes: Optional[int] = None,
        one_time_downloads: Optional[bool] = None,
        short_links_enabled: Optional[bool] = None,
        default_expires_in_hours: Optional[float] = None,
    ):
        if max_upload_bytes is None:
            max_upload_bytes = int(
                float(os.getenv("MAX_UPLOAD_SIZE_MB", DEFAULT_MAX_UPLOAD_MB)) * BYTES_PER_MB
            )
        if one_time_downloads is None:
            one_time_downloads = _env_flag("ONE_TIME_DOWNLOADS", True)
        if short_links_enabled is None:
            short_links_enabled = _env_flag("SHORT_LINKS_ENABLED", True)
        if default_expires_in_hours is None:
            default_expires_in_hours = _env_optional_float("DEFAULT_EXPIRES_IN_HOURS")

        self.max_upload_bytes = max_upload_bytes
        self.one_time_downloads = one_time_downloads
        self.short_links_enabled = short_links_enabled
        self.default_expires_in_hours = default_expires_in_hours
