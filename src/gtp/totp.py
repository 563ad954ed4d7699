"""TOTP token generation utilities (RFC 6238, HMAC-SHA1, 30 second step)."""

import base64
import time
from datetime import datetime, timezone
from typing import Optional, Union

import pyotp

from .errors import EmptySecret, InvalidSecretEncoding

PERIOD = 30
DIGITS = 6

Timestamp = Union[datetime, int, float]


def decode_secret(secret: str) -> bytes:
    """Decode a Base32 secret into raw key bytes.

    Case-insensitive, padding optional. Spaces are ignored so secrets copied
    in groups of four still decode.

    Args:
        secret: The Base32 secret text

    Returns:
        The decoded key bytes

    Raises:
        InvalidSecretEncoding: If the text is not valid Base32
    """
    cleaned = "".join(secret.split()).upper().rstrip("=")
    try:
        return pyotp.TOTP(cleaned).byte_secret()
    except ValueError as exc:
        raise InvalidSecretEncoding() from exc


def encode_secret(raw: bytes) -> str:
    """Encode raw key bytes as unpadded uppercase Base32."""
    return base64.b32encode(raw).decode("ascii").rstrip("=")


def _unix_time(timestamp: Timestamp) -> float:
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.timestamp()
    return float(timestamp)


def time_step(timestamp: Timestamp) -> int:
    """Return the 30 second window counter containing timestamp."""
    return int(_unix_time(timestamp) // PERIOD)


def generate_code(secret_bytes: bytes, timestamp: Timestamp) -> str:
    """Generate the TOTP code for the window containing timestamp.

    Args:
        secret_bytes: Decoded shared secret
        timestamp: A datetime (naive values are UTC) or seconds since the epoch

    Returns:
        The 6 digit code, zero padded

    Raises:
        EmptySecret: If secret_bytes is empty
    """
    if not secret_bytes:
        raise EmptySecret()

    totp = pyotp.TOTP(encode_secret(secret_bytes), digits=DIGITS, interval=PERIOD)
    # Aware datetimes keep pyotp off the local-time conversion path
    return totp.at(datetime.fromtimestamp(_unix_time(timestamp), timezone.utc))


def generate_code_for_secret(secret: str, timestamp: Optional[Timestamp] = None) -> str:
    """Decode a Base32 secret and generate its code, defaulting to now (UTC)."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    return generate_code(decode_secret(secret), timestamp)


def get_time_remaining(timestamp: Optional[Timestamp] = None) -> int:
    """Get seconds remaining until the next token refresh.

    Returns:
        Number of seconds until the next 30-second window, between 1 and 30
    """
    now = time.time() if timestamp is None else _unix_time(timestamp)
    return PERIOD - (int(now) % PERIOD)


def get_valid_until_time(timestamp: Optional[Timestamp] = None) -> str:
    """Get the UTC time when the current token will expire.

    Returns:
        Time string in HH:MM:SS format
    """
    now = time.time() if timestamp is None else _unix_time(timestamp)
    expires = (time_step(now) + 1) * PERIOD
    return datetime.fromtimestamp(expires, timezone.utc).strftime("%H:%M:%S")
