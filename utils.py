"""
Thumbnail Wizard - Utilities
============================
Common utilities, logging, and helper functions.
"""

import sys
import base64
import binascii
import logging
import re
from pathlib import Path
from datetime import datetime
from typing import Optional

from config import LOG_LEVEL, LOG_FILE, SAVE_LOGS

# Configure stdout encoding for Windows
if sys.platform == 'win32':
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')


# =============================================================================
# COLORED LOGGER
# =============================================================================

class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for terminal output"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[34m',      # Blue
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'SUCCESS': '\033[32m',   # Green
        'RESET': '\033[0m',
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
        formatted = f"[{timestamp}] [{color}{record.levelname:^8}{reset}] [{record.name}] {record.getMessage()}"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def setup_logger(name: str, log_file: Optional[Path] = None, level: str = LOG_LEVEL) -> logging.Logger:
    """Setup a colored logger with optional file output"""

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter())
    logger.addHandler(console_handler)

    if log_file is None and SAVE_LOGS:
        log_file = LOG_FILE

    # File handler (plain text)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    return logger


# Add SUCCESS level
logging.SUCCESS = 25
logging.addLevelName(logging.SUCCESS, 'SUCCESS')

def success(self, message, *args, **kwargs):
    if self.isEnabledFor(logging.SUCCESS):
        self._log(logging.SUCCESS, message, args, **kwargs)

logging.Logger.success = success


# =============================================================================
# DATA URI HELPERS
# =============================================================================

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<data>.*)$", re.DOTALL)


def is_data_uri(value: Optional[str]) -> bool:
    """True if value is a base64 data URI"""
    return bool(value) and value.startswith("data:")


def decode_data_uri(value: str) -> tuple[str, bytes]:
    """
    Decode a base64 data URI.

    Returns:
        (mime_type, raw_bytes)

    Raises:
        ValueError: if the value is not a base64 data URI
    """
    match = _DATA_URI_RE.match(value)
    if not match:
        raise ValueError("Not a base64 data URI")
    try:
        data = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return match.group("mime") or "application/octet-stream", data


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI"""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


# =============================================================================
# FILE UTILITIES
# =============================================================================

def sanitize_filename(name: str) -> str:
    """Remove invalid characters from filename"""
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        name = name.replace(char, '_')
    return name.strip()


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, create if needed"""
    path.mkdir(parents=True, exist_ok=True)
    return path


def timestamped_filename(prefix: str, extension: str) -> str:
    """Build a download name like thumbnail-20250101_120000.jpg"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}-{timestamp}.{extension.lstrip('.')}"
