"""Credential store: records, the persisted blob format and the store file."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Optional, Sequence, Union

from .errors import CorruptStore, PositionOutOfRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """A registered secret plus its display labels."""

    issuer: str
    account_name: str
    secret: str

    def to_dict(self) -> dict[str, Any]:
        """Convert credential to its persisted dictionary form."""
        return {
            "Issuer": self.issuer,
            "AccountName": self.account_name,
            "Secret": self.secret,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credential":
        """Create credential from its persisted dictionary form."""
        return cls(
            issuer=str(data.get("Issuer") or ""),
            account_name=str(data.get("AccountName") or ""),
            secret=str(data.get("Secret") or ""),
        )


def load(blob: bytes) -> list[Credential]:
    """Deserialize the persisted blob.

    An empty blob means no records.

    Raises:
        CorruptStore: If the blob is not a JSON array of objects
    """
    if not blob.strip():
        return []

    try:
        data = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CorruptStore(str(exc)) from exc

    if not isinstance(data, list):
        raise CorruptStore("expected a JSON array")
    if not all(isinstance(item, dict) for item in data):
        raise CorruptStore("expected an array of objects")

    return [Credential.from_dict(item) for item in data]


def serialize(records: Sequence[Credential]) -> bytes:
    """Serialize records, writing an empty list as empty bytes."""
    if not records:
        return b""
    return json.dumps([record.to_dict() for record in records]).encode("utf-8")


def append(records: Sequence[Credential], record: Credential) -> list[Credential]:
    """Return a new list with record added at the end."""
    return [*records, record]


def parse_position(text: str) -> int:
    """Parse a user-typed position.

    Raises:
        PositionOutOfRange: If text is not an integer
    """
    try:
        return int(text.strip())
    except ValueError:
        raise PositionOutOfRange(text.strip()) from None


def _index(records: Sequence[Credential], position: Union[int, str]) -> int:
    if isinstance(position, str):
        position = parse_position(position)
    if not 1 <= position <= len(records):
        raise PositionOutOfRange(position)
    return position - 1


def select(records: Sequence[Credential], position: Union[int, str]) -> Credential:
    """Get the credential at a 1-based position.

    Raises:
        PositionOutOfRange: If position is not within 1..len(records)
    """
    return records[_index(records, position)]


def remove_at(records: Sequence[Credential], position: Union[int, str]) -> list[Credential]:
    """Remove the credential at a 1-based position.

    Later records shift down by one position. The input is left untouched.

    Raises:
        PositionOutOfRange: If position is not within 1..len(records)
    """
    index = _index(records, position)
    return [*records[:index], *records[index + 1 :]]


def clear() -> list[Credential]:
    """Return an empty store."""
    return []


def describe(records: Sequence[Credential]) -> list[str]:
    """Render one display line per record, never showing the secret."""
    return [
        f"{{{position}}} {record.issuer}:{record.account_name}:<secret>"
        for position, record in enumerate(records, start=1)
    ]


class StoreFile:
    """Open-or-create handle on the persisted store file.

    Use as a context manager; the handle is closed on every exit path.
    """

    def __init__(self, store_path: Path):
        """Initialize with the given path.

        Args:
            store_path: Path to the store file
        """
        self.store_path = store_path
        self._handle: Optional[BinaryIO] = None

    def exists(self) -> bool:
        """Check if the store file exists."""
        return self.store_path.exists()

    def open(self) -> None:
        """Open the store file read/write, creating it empty if absent."""
        if not self.exists():
            logger.debug("Creating empty store at %s", self.store_path)
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            self.store_path.touch(mode=0o600)
        self._handle = open(self.store_path, "r+b")

    def close(self) -> None:
        """Close the store file if it is open."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "StoreFile":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _require_handle(self) -> BinaryIO:
        if self._handle is None:
            raise ValueError(f"Store {self.store_path} is not open")
        return self._handle

    def read(self) -> bytes:
        """Read the entire store file."""
        handle = self._require_handle()
        handle.seek(0)
        blob = handle.read()
        logger.debug("Read %d bytes from %s", len(blob), self.store_path)
        return blob

    def write(self, blob: bytes) -> None:
        """Overwrite the entire store file with blob."""
        handle = self._require_handle()
        handle.seek(0)
        handle.truncate()
        handle.write(blob)
        handle.flush()
        logger.debug("Wrote %d bytes to %s", len(blob), self.store_path)

    def load(self) -> list[Credential]:
        """Read and deserialize the store file.

        Raises:
            CorruptStore: If the contents are not a valid store
        """
        return load(self.read())

    def save(self, records: Sequence[Credential]) -> None:
        """Serialize records and overwrite the store file."""
        self.write(serialize(records))
