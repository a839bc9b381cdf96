"""Command dispatcher for off-chain secure JSON storage and attestation."""

from __future__ import annotations

import os
import time
from enum import IntEnum
from typing import Callable

from offchain_vault.attestation import NONCE_SIZE, AttestationReport, get_code_attestation
from offchain_vault.counter import Counter
from offchain_vault.crypto import (
    HASH_SIZE_HEX,
    compute_sha256,
    decrypt_aes_data,
    encrypt_aes_data,
    generate_aes_key,
    generate_rsa_key_pair,
    get_rsa_public_key,
)
from offchain_vault.hexstr import convert_to_hex_str
from offchain_vault.storage import (
    BadParametersError,
    PersistentStore,
    TeeError,
)

NOT_SUPPORTED_CODE = 0xFFFF000A


class Command(IntEnum):
    """Command identifiers understood by the service."""

    STORE_JSON = 0
    RETRIEVE_JSON = 1
    HASH_JSON = 2
    GET_ATTESTATION = 3
    GET_PUBLIC_KEY = 4


def _as_bytes(value: str | bytes, what: str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise BadParametersError(f"{what} must be str or bytes")


class SecureStorageService:
    """Stores encrypted JSON keyed by its SHA-256 hash and issues signed attestations."""

    def __init__(
        self, root: str | os.PathLike, clock: Callable[[], float] = time.time
    ) -> None:
        self.store = PersistentStore(root)
        self.counter = Counter(self.store, clock)
        generate_rsa_key_pair(self.store)
        generate_aes_key(self.store)
        self._handlers = {
            Command.STORE_JSON: (self._store_json, 2),
            Command.RETRIEVE_JSON: (self._retrieve_json, 1),
            Command.HASH_JSON: (self._hash_json, 1),
            Command.GET_ATTESTATION: (self._get_attestation, 1),
            Command.GET_PUBLIC_KEY: (self._get_public_key, 0),
        }

    def store_json(self, iot_device_id: str | bytes, data: str | bytes) -> str:
        """Encrypt and persist data; return the hex SHA-256 of the plaintext."""
        return self.invoke(Command.STORE_JSON, iot_device_id, data)

    def retrieve_json(self, json_hash: str | bytes) -> bytes:
        """Return the decrypted data stored under a hex hash."""
        return self.invoke(Command.RETRIEVE_JSON, json_hash)

    def hash_json(self, data: str | bytes) -> str:
        """Return the hex SHA-256 of data without storing it."""
        return self.invoke(Command.HASH_JSON, data)

    def get_attestation(self, nonce: bytes) -> AttestationReport:
        """Return a signed attestation report bound to the verifier's nonce."""
        return self.invoke(Command.GET_ATTESTATION, nonce)

    def get_public_key(self) -> str:
        """Return the RSA public key (modulus then exponent) as hex."""
        return self.invoke(Command.GET_PUBLIC_KEY)

    def invoke(self, command: int, *args):
        """Advance the counter, then run a command with its arguments."""
        self.counter.update()
        try:
            cmd = Command(command)
        except ValueError:
            raise TeeError(
                f"command ID 0x{int(command):x} is not supported", code=NOT_SUPPORTED_CODE
            ) from None
        handler, arity = self._handlers[cmd]
        if len(args) != arity:
            raise BadParametersError(
                f"{cmd.name} takes {arity} parameters, got {len(args)}"
            )
        return handler(*args)

    def _store_json(self, iot_device_id: str | bytes, data: str | bytes) -> str:
        _as_bytes(iot_device_id, "IoT device ID")
        payload = _as_bytes(data, "data")
        digest_hex = convert_to_hex_str(compute_sha256(payload), HASH_SIZE_HEX)
        encrypted = encrypt_aes_data(self.store, payload)
        self.store.create(digest_hex, encrypted)
        return digest_hex

    def _retrieve_json(self, json_hash: str | bytes) -> bytes:
        object_id = _as_bytes(json_hash, "hash")
        encrypted = self.store.read(object_id)
        return decrypt_aes_data(self.store, encrypted)

    def _hash_json(self, data: str | bytes) -> str:
        payload = _as_bytes(data, "data")
        return convert_to_hex_str(compute_sha256(payload), HASH_SIZE_HEX)

    def _get_attestation(self, nonce: bytes) -> AttestationReport:
        if nonce is None or len(bytes(nonce)) != NONCE_SIZE:
            raise BadParametersError(f"nonce must be {NONCE_SIZE} bytes")
        return get_code_attestation(self.store, self.counter, bytes(nonce))

    def _get_public_key(self) -> str:
        raw = get_rsa_public_key(self.store)
        return convert_to_hex_str(raw, len(raw) * 2)