"""Hexadecimal and UUID string conversions."""

from __future__ import annotations

import uuid as _uuid
from typing import Sequence, Tuple, Union

from offchain_vault.storage import ShortBufferError

UUID_SIZE = 37

UuidLike = Union[_uuid.UUID, Tuple[int, int, int, Sequence[int]]]


def convert_to_hex_str(data: bytes, output_size: int) -> str:
    """Return lowercase hex of data; output_size must be exactly twice its length."""
    data = bytes(data)
    if output_size != len(data) * 2:
        raise ShortBufferError(
            f"output size mismatch, expected: {len(data) * 2}, got: {output_size}"
        )
    return data.hex()


def uuid_to_str(uuid: UuidLike) -> str:
    """Format a UUID as 8-4-4-4-12 lowercase hex digits."""
    if isinstance(uuid, _uuid.UUID):
        return str(uuid)
    time_low, time_mid, time_hi_and_version, clock_seq_and_node = uuid
    node = bytes(clock_seq_and_node)
    if len(node) != 8:
        raise ValueError("clock_seq_and_node must hold 8 bytes")
    return (
        f"{time_low & 0xFFFFFFFF:08x}-{time_mid & 0xFFFF:04x}-"
        f"{time_hi_and_version & 0xFFFF:04x}-{node[:2].hex()}-{node[2:].hex()}"
    )