"""Command-line client for the off-chain secure storage service."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Sequence

from offchain_vault.attestation import NONCE_SIZE
from offchain_vault.crypto import HASH_SIZE_HEX
from offchain_vault.service import SecureStorageService
from offchain_vault.storage import (
    AccessConflictError,
    ItemNotFoundError,
    ShortBufferError,
    TeeError,
)

PROG = "offchain-vault"
HOME_ENV = "OFFCHAIN_VAULT_HOME"

DEVICE_ID_MAX_SIZE = 64
JSON_MAX_SIZE = 7000
# "iot_device_" and ":" prefix plus a terminator.
STORE_MAX_SIZE = DEVICE_ID_MAX_SIZE + 12 + JSON_MAX_SIZE + 1

USAGE = f"""Usage: {PROG} <command>

Commands:
  store <iot_device_id> <json_data> - Store JSON data for a given IoT device ID
  retrieve <json_hash> - Retrieve JSON data for a given hash
  hash <json_data> - Get SHA256 hash of a given JSON data
  attest - Get attestation data of the service
  public-key - Get public key of the service"""


def generate_nonce() -> bytes:
    """Return NONCE_SIZE bytes from the system's random source."""
    nonce = os.urandom(NONCE_SIZE)
    if len(nonce) != NONCE_SIZE:
        raise OSError("failed to read nonce from the random source")
    return nonce


def build_store_payload(iot_device_id: str, json_data: str) -> str:
    """Combine a device ID and JSON data as "iot_device_<id>:<json>"."""
    id_len = len(iot_device_id.encode("utf-8"))
    json_len = len(json_data.encode("utf-8"))
    if id_len > DEVICE_ID_MAX_SIZE or json_len > JSON_MAX_SIZE:
        raise ValueError(
            "IoT device ID or JSON data exceeds maximum size:\n"
            f"  IoT device ID max size: {DEVICE_ID_MAX_SIZE}, got: {id_len}\n"
            f"  JSON data max size: {JSON_MAX_SIZE}, got: {json_len}"
        )
    payload = f"iot_device_{iot_device_id}:{json_data}"
    if len(payload.encode("utf-8")) >= STORE_MAX_SIZE:
        raise ValueError("Combined data exceeds maximum size.")
    return payload


def _storage_root() -> Path:
    configured = os.environ.get(HOME_ENV)
    return Path(configured) if configured else Path.home() / ".offchain_vault"


def _err(message: str) -> None:
    print(message, file=sys.stderr)


def _command_failed(name: str, exc: TeeError) -> None:
    _err(f"Command {name} failed: 0x{exc.code:x} ({exc})")


def _store(service: SecureStorageService, device_id: str, json_data: str) -> int | None:
    try:
        payload = build_store_payload(device_id, json_data)
    except ValueError as exc:
        _err(f"Error: {exc}")
        return 1
    try:
        digest = service.store_json(device_id, payload)
    except AccessConflictError as exc:
        _command_failed("STORE_JSON", exc)
        _err("Error: The persistent object already exists.")
        return exc.code & 0xFF
    except TeeError as exc:
        _command_failed("STORE_JSON", exc)
        _err(f"Error: Failed to store JSON data for IoT device ID: {device_id}")
        return None
    print(f"SHA256 hash of the JSON data: {digest}")
    return None


def _retrieve(service: SecureStorageService, json_hash: str) -> int | None:
    object_id = json_hash.encode("utf-8")[:HASH_SIZE_HEX]
    try:
        data = service.retrieve_json(object_id)
        if len(data) > JSON_MAX_SIZE:
            raise ShortBufferError("retrieved data does not fit the output buffer")
    except ShortBufferError:
        _err(
            "Error: The provided buffer is too short, expected size: "
            f"{JSON_MAX_SIZE}"
        )
        return 1
    except ItemNotFoundError:
        _err("Error: No JSON data found for the provided hash.")
        return 1
    except TeeError as exc:
        _command_failed("RETRIEVE_JSON", exc)
        return None
    text = data.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    print(f"Retrieved JSON data: {text}")
    return None


def _hash(service: SecureStorageService, json_data: str) -> None:
    payload = json_data.encode("utf-8")[:JSON_MAX_SIZE]
    try:
        digest = service.hash_json(payload)
    except TeeError as exc:
        _command_failed("HASH_JSON", exc)
        _err("Error: Failed to hash JSON data")
        return
    print(f"SHA256 hash of the JSON data: {digest}")


def _attest(service: SecureStorageService) -> None:
    try:
        nonce = generate_nonce()
    except OSError as exc:
        _err(f"Failed to generate nonce: {exc}")
        _err("Error: Failed to get attestation data")
        return
    try:
        report = service.get_attestation(nonce)
    except TeeError as exc:
        _command_failed("GET_ATTESTATION", exc)
        _err("Error: Failed to get attestation data")
        return
    print("Attestation report:")
    print(f"  Data: {report.data}")
    print(f"  Hash: {report.hash}")
    print(f"  Signature: {report.signature}")


def _public_key(service: SecureStorageService) -> None:
    try:
        key_hex = service.get_public_key()
    except TeeError as exc:
        _command_failed("GET_PUBLIC_KEY", exc)
        _err("Error: Failed to get public key")
        return
    print(f"Public key: {key_hex}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run one storage command; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(USAGE)
        return 1

    print("Prepare session with the secure storage service\n")
    try:
        service = SecureStorageService(_storage_root())
    except (TeeError, OSError) as exc:
        _err(f"Opening the secure storage service failed: {exc}")
        return 1

    command, rest = args[0], args[1:]
    status: int | None = None
    if command == "store" and len(rest) == 2:
        status = _store(service, rest[0], rest[1])
    elif command == "retrieve" and len(rest) == 1:
        status = _retrieve(service, rest[0])
    elif command == "hash" and len(rest) == 1:
        _hash(service, rest[0])
    elif command == "attest" and not rest:
        _attest(service)
    elif command == "public-key" and not rest:
        _public_key(service)
    else:
        _err(f"Unknown command: {command}")
        return 1

    if status is not None:
        return status
    print("\nWe're done, close and release resources")
    return 0


if __name__ == "__main__":
    sys.exit(main())