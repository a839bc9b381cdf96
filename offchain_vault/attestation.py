"""Signed code attestation reports."""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, utils

from offchain_vault.counter import Counter
from offchain_vault.crypto import (
    HASH_SIZE,
    HASH_SIZE_HEX,
    RSA_KEYPAIR_STORAGE_NAME,
    RSA_SIGNATURE_SIZE_HEX,
    compute_sha256,
    generate_rsa_key_pair,
)
from offchain_vault.hexstr import UUID_SIZE, convert_to_hex_str, uuid_to_str
from offchain_vault.storage import (
    TA_UUID,
    BadParametersError,
    ItemNotFoundError,
    PersistentStore,
    ShortBufferError,
)

NONCE_SIZE = 32
NONCE_SIZE_HEX = NONCE_SIZE * 2

# Capacity of the report's data field, terminator included.
REPORT_DATA_SIZE = (UUID_SIZE - 1) + 8 + 4 + NONCE_SIZE_HEX + 34 + 1


@dataclass(frozen=True)
class AttestationReport:
    """Report data together with its SHA-256 hash and RSA signature, as hex."""

    data: str
    hash: str
    signature: str


def _signing_key(store: PersistentStore):
    if not store.exists(RSA_KEYPAIR_STORAGE_NAME):
        raise ItemNotFoundError("RSA key pair for signing is not provisioned")
    return generate_rsa_key_pair(store)


def get_code_attestation(
    store: PersistentStore, counter: Counter, nonce: bytes
) -> AttestationReport:
    """Build and sign a report of TA UUID, counter, its timestamp and the nonce."""
    if nonce is None:
        raise BadParametersError("nonce is required")
    nonce = bytes(nonce)
    if len(nonce) != NONCE_SIZE:
        raise BadParametersError(
            f"nonce must be {NONCE_SIZE} bytes, got {len(nonce)}"
        )

    counter_value = counter.get_counter()
    uuid = uuid_to_str(TA_UUID)
    nonce_hex = convert_to_hex_str(nonce, NONCE_SIZE_HEX)
    timestamp = counter.get_timestamp()

    data = (
        f"{{uuid:{uuid},counter:{counter_value},"
        f"timestamp:{timestamp},nonce:{nonce_hex}}}"
    )
    if len(data) + 1 > REPORT_DATA_SIZE:
        raise ShortBufferError(
            f"report data needs {len(data) + 1} bytes, capacity is {REPORT_DATA_SIZE}"
        )

    digest = compute_sha256(data)
    key = _signing_key(store)
    signature = key.sign(
        digest,
        padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=HASH_SIZE),
        utils.Prehashed(hashes.SHA256()),
    )

    return AttestationReport(
        data=data,
        hash=convert_to_hex_str(digest, HASH_SIZE_HEX),
        signature=convert_to_hex_str(signature, RSA_SIGNATURE_SIZE_HEX),
    )