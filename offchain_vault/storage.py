"""Persistent object storage with TEE-style error types."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

TA_UUID = (
    0xE3AE8C32,
    0x5FC1,
    0x42E4,
    (0xB4, 0x76, 0xB3, 0x5F, 0xE3, 0xF8, 0xF0, 0x7D),
)
TA_VERSION = "1.0"
TA_DESCRIPTION = "Trusted Application for secure off-chain data storage"

OBJECT_ID_MAX_LEN = 64


class TeeError(Exception):
    """Base error carrying a TEE result code."""

    code = 0xFFFF0000

    def __init__(self, message: str = "", code: int | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class BadParametersError(TeeError):
    code = 0xFFFF0006


class ShortBufferError(TeeError):
    code = 0xFFFF0010


class ItemNotFoundError(TeeError):
    code = 0xFFFF0008


class AccessConflictError(TeeError):
    code = 0xFFFF0003


class CorruptObjectError(TeeError):
    code = 0xF0100001


def _encode_id(object_id: str | bytes) -> bytes:
    raw = object_id.encode("utf-8") if isinstance(object_id, str) else bytes(object_id)
    if not raw or len(raw) > OBJECT_ID_MAX_LEN:
        raise BadParametersError(
            f"object id must be 1..{OBJECT_ID_MAX_LEN} bytes, got {len(raw)}"
        )
    return raw


class PersistentStore:
    """Directory-backed store of named binary objects."""

    def __init__(self, root: str | os.PathLike) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, object_id: str | bytes) -> Path:
        return self.root / _encode_id(object_id).hex()

    def create(self, object_id: str | bytes, data: bytes, overwrite: bool = False) -> None:
        """Create an object; an existing one is replaced only when overwrite is set."""
        path = self._path(object_id)
        if path.exists() and not overwrite:
            raise AccessConflictError(f"object {object_id!r} already exists")
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(bytes(data))
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def read(self, object_id: str | bytes) -> bytes:
        """Return the whole content of an object."""
        try:
            return self._path(object_id).read_bytes()
        except FileNotFoundError:
            raise ItemNotFoundError(f"object {object_id!r} not found") from None

    def exists(self, object_id: str | bytes) -> bool:
        return self._path(object_id).is_file()

    def delete(self, object_id: str | bytes) -> None:
        try:
            self._path(object_id).unlink()
        except FileNotFoundError:
            raise ItemNotFoundError(f"object {object_id!r} not found") from None