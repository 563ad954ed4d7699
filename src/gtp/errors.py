"""Exceptions raised by gtp."""

from typing import Union


class GtpError(Exception):
    """Base class for all gtp errors."""


class InvalidSecretEncoding(GtpError):
    """The stored secret is not valid Base32."""

    def __init__(self, reason: str = "not valid Base32"):
        super().__init__(f"Secret is {reason}")
        self.reason = reason


class EmptySecret(GtpError):
    """The secret decodes to zero bytes."""

    def __init__(self):
        super().__init__("Secret is empty")


class PositionOutOfRange(GtpError):
    """A selected position does not address a registered credential.

    Attributes:
        position: The offending input, as an int or the raw text typed
    """

    def __init__(self, position: Union[int, str]):
        super().__init__(f"Selected number {position} is out of range of the OTP list")
        self.position = position


class CorruptStore(GtpError):
    """The persisted store could not be decoded."""

    def __init__(self, reason: str):
        super().__init__(f"Store is corrupt: {reason}")
        self.reason = reason


class ConfigError(GtpError):
    """The configuration file is malformed."""
