"""Hashing, key management and AES-CTR encryption over the object store."""

from __future__ import annotations

import hashlib
import os

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from offchain_vault.storage import (
    CorruptObjectError,
    ItemNotFoundError,
    PersistentStore,
    ShortBufferError,
)

RSA_KEY_SIZE_BITS = 2048
RSA_MODULUS_SIZE = RSA_KEY_SIZE_BITS // 8
RSA_EXPONENT_SIZE = 4
RSA_PUBLIC_KEY_SIZE = RSA_MODULUS_SIZE + RSA_EXPONENT_SIZE
RSA_PUBLIC_KEY_SIZE_HEX = RSA_PUBLIC_KEY_SIZE * 2
RSA_SIGNATURE_SIZE = RSA_KEY_SIZE_BITS // 8
RSA_SIGNATURE_SIZE_HEX = RSA_SIGNATURE_SIZE * 2
RSA_PUBLIC_EXPONENT = 65537

AES_BLOCK_SIZE = 16
AES_KEY_SIZE = 256

HASH_SIZE = 32
HASH_SIZE_HEX = HASH_SIZE * 2

RSA_KEYPAIR_STORAGE_NAME = "rsaKeyPair"
AES_KEY_STORAGE_NAME = "aesKey"


def _as_bytes(data: str | bytes) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def compute_sha256(data: str | bytes) -> bytes:
    """Return the 32-byte SHA-256 digest of data."""
    return hashlib.sha256(_as_bytes(data)).digest()


def _load_rsa_key(store: PersistentStore) -> rsa.RSAPrivateKey:
    raw = store.read(RSA_KEYPAIR_STORAGE_NAME)
    try:
        key = serialization.load_der_private_key(raw, password=None)
    except ValueError as exc:
        raise CorruptObjectError(f"stored RSA key pair is unreadable: {exc}") from None
    if not isinstance(key, rsa.RSAPrivateKey):
        raise CorruptObjectError("stored key pair is not an RSA key")
    return key


def generate_rsa_key_pair(store: PersistentStore) -> rsa.RSAPrivateKey:
    """Return the stored RSA key pair, generating and persisting one if absent."""
    try:
        return _load_rsa_key(store)
    except ItemNotFoundError:
        pass
    key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT, key_size=RSA_KEY_SIZE_BITS
    )
    der = key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    store.create(RSA_KEYPAIR_STORAGE_NAME, der)
    return key


def generate_aes_key(store: PersistentStore) -> bytes:
    """Return the stored AES key, generating and persisting one if absent."""
    try:
        key = store.read(AES_KEY_STORAGE_NAME)
    except ItemNotFoundError:
        key = os.urandom(AES_KEY_SIZE // 8)
        store.create(AES_KEY_STORAGE_NAME, key)
        return key
    if len(key) != AES_KEY_SIZE // 8:
        raise CorruptObjectError(
            f"stored AES key has {len(key)} bytes, expected {AES_KEY_SIZE // 8}"
        )
    return key


def get_rsa_public_key(store: PersistentStore) -> bytes:
    """Return the stored RSA public key as modulus followed by exponent bytes."""
    numbers = _load_rsa_key(store).public_key().public_numbers()
    modulus = numbers.n.to_bytes((numbers.n.bit_length() + 7) // 8, "big")
    exponent = numbers.e.to_bytes((numbers.e.bit_length() + 7) // 8, "big")
    if len(modulus) > RSA_MODULUS_SIZE or len(exponent) > RSA_EXPONENT_SIZE:
        raise ShortBufferError(
            f"public key does not fit in {RSA_PUBLIC_KEY_SIZE} bytes"
        )
    return modulus + exponent


def _aes_ctr(key: bytes, iv: bytes):
    return Cipher(algorithms.AES(key), modes.CTR(iv))


def encrypt_aes_data(store: PersistentStore, plaintext: str | bytes) -> bytes:
    """Encrypt with AES-CTR under a fresh random IV; returns IV + ciphertext."""
    key = generate_aes_key(store)
    iv = os.urandom(AES_BLOCK_SIZE)
    encryptor = _aes_ctr(key, iv).encryptor()
    return iv + encryptor.update(_as_bytes(plaintext)) + encryptor.finalize()


def decrypt_aes_data(store: PersistentStore, ciphertext: bytes) -> bytes:
    """Decrypt IV + ciphertext produced by encrypt_aes_data."""
    ciphertext = bytes(ciphertext)
    if len(ciphertext) < AES_BLOCK_SIZE:
        raise ShortBufferError(
            f"ciphertext too short, expected at least {AES_BLOCK_SIZE} bytes"
        )
    iv, body = ciphertext[:AES_BLOCK_SIZE], ciphertext[AES_BLOCK_SIZE:]
    key = generate_aes_key(store)
    decryptor = _aes_ctr(key, iv).decryptor()
    return decryptor.update(body) + decryptor.finalize()