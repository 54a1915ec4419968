"""Helper signatures: serial_from_id, sha1_digest, as_utc."""

import hashlib
import datetime


def serial_from_id(ident: str) -> int:
    """Interpret the UTF-8 bytes of ident as a big-endian integer."""
    return int.from_bytes(ident.encode("utf-8"), "big")


def sha1_digest(data: bytes) -> bytes:
    """Return the raw 20-byte SHA-1 digest of bytes."""
    return hashlib.sha1(data).digest()


def as_utc(moment: datetime.datetime) -> datetime.datetime:
    """Naive datetimes are taken as UTC; aware ones are converted."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone(datetime.timezone.utc)
