"""Centralized settings and constants used across the OTM pipeline."""

import os
from typing import Optional


def _env_bool(name: str, default: bool = False) -> bool:
    v = str(os.getenv(name, str(default))).strip().lower()
    return v in ("1", "true", "t", "yes", "y", "on")


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# Document enhancement
MAX_DOCUMENT_WIDTH = 1500
JPEG_QUALITY = 92
BACKGROUND_RATIO = 0.7  # fraction of the brightest luma treated as paper
FOREGROUND_SCALE = 200

# OTM records
DATE_FORMAT = '%d/%m/%Y'
TIME_FORMAT = '%H:%M'
DEFAULT_TECHNICIAN = 'Técnico'
EQUIPMENT_CODE_LENGTH = 12

# Remote document store
DEFAULT_UPLOAD_TIMEOUT = 30


def get_upload_timeout() -> float:
    """Timeout in seconds for a single remote delivery attempt."""
    return _env_float('UPLOAD_TIMEOUT_SECONDS', DEFAULT_UPLOAD_TIMEOUT)


def get_drive_api_url() -> str:
    """Remote document store endpoint; empty when uploads are disabled."""
    return os.environ.get('DRIVE_API_URL', '').strip()


def get_aws_endpoint() -> Optional[str]:
    """
    Endpoint override for boto3 clients.

    Returns the LocalStack endpoint when USE_LOCALSTACK is enabled, None otherwise.
    """
    endpoint_url = os.environ.get('LOCALSTACK_ENDPOINT')
    if endpoint_url and _env_bool('USE_LOCALSTACK', False):
        return endpoint_url
    return None
