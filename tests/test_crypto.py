import pytest

from offchain_vault.crypto import (
    AES_BLOCK_SIZE,
    AES_KEY_STORAGE_NAME,
    HASH_SIZE,
    RSA_KEY_SIZE_BITS,
    RSA_MODULUS_SIZE,
    RSA_PUBLIC_KEY_SIZE,
    RSA_KEYPAIR_STORAGE_NAME,
    compute_sha256,
    decrypt_aes_data,
    encrypt_aes_data,
    generate_aes_key,
    generate_rsa_key_pair,
    get_rsa_public_key,
)
from offchain_vault.storage import (
    CorruptObjectError,
    ItemNotFoundError,
    PersistentStore,
    ShortBufferError,
)


@pytest.fixture
def store(tmp_path):
    return PersistentStore(tmp_path / "objects")


@pytest.fixture(scope="module")
def rsa_store(tmp_path_factory):
    store = PersistentStore(tmp_path_factory.mktemp("rsa"))
    generate_rsa_key_pair(store)
    return store


def test_sha256_known_vector():
    assert compute_sha256(b"abc").hex() == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_sha256_str_and_bytes_agree():
    digest = compute_sha256('{"a":1}')
    assert digest == compute_sha256(b'{"a":1}')
    assert len(digest) == HASH_SIZE


def test_sha256_differs_for_different_input():
    assert compute_sha256(b"one") != compute_sha256(b"two")


def test_aes_key_generated_and_persisted(store):
    key = generate_aes_key(store)
    assert len(key) == 32
    assert store.read(AES_KEY_STORAGE_NAME) == key
    assert generate_aes_key(store) == key


def test_aes_key_corrupt_length_rejected(store):
    store.create(AES_KEY_STORAGE_NAME, b"short")
    with pytest.raises(CorruptObjectError):
        generate_aes_key(store)


def test_rsa_key_pair_size_and_persistence(rsa_store):
    key = generate_rsa_key_pair(rsa_store)
    assert key.key_size == RSA_KEY_SIZE_BITS
    assert rsa_store.exists(RSA_KEYPAIR_STORAGE_NAME)
    again = generate_rsa_key_pair(rsa_store)
    assert again.public_key().public_numbers() == key.public_key().public_numbers()


def test_public_key_missing(store):
    with pytest.raises(ItemNotFoundError):
        get_rsa_public_key(store)


def test_public_key_layout(rsa_store):
    public_key = get_rsa_public_key(rsa_store)
    numbers = generate_rsa_key_pair(rsa_store).public_key().public_numbers()
    modulus = public_key[:RSA_MODULUS_SIZE]
    assert int.from_bytes(modulus, "big") == numbers.n
    assert public_key[RSA_MODULUS_SIZE:] == b"\x01\x00\x01"
    assert len(public_key) <= RSA_PUBLIC_KEY_SIZE


def test_corrupt_rsa_key(store):
    store.create(RSA_KEYPAIR_STORAGE_NAME, b"not a key")
    with pytest.raises(CorruptObjectError):
        get_rsa_public_key(store)


def test_encrypt_decrypt_round_trip(store):
    plaintext = b'iot_device_sensor-01:{"temp": 21}'
    ciphertext = encrypt_aes_data(store, plaintext)
    assert len(ciphertext) == len(plaintext) + AES_BLOCK_SIZE
    assert plaintext not in ciphertext
    assert decrypt_aes_data(store, ciphertext) == plaintext


def test_encrypt_str_round_trip(store):
    ciphertext = encrypt_aes_data(store, "hello")
    assert decrypt_aes_data(store, ciphertext) == b"hello"


def test_encrypt_uses_fresh_iv(store):
    first = encrypt_aes_data(store, b"same data")
    second = encrypt_aes_data(store, b"same data")
    assert first[:AES_BLOCK_SIZE] != second[:AES_BLOCK_SIZE]
    assert decrypt_aes_data(store, first) == decrypt_aes_data(store, second)


def test_encrypt_empty(store):
    ciphertext = encrypt_aes_data(store, b"")
    assert len(ciphertext) == AES_BLOCK_SIZE
    assert decrypt_aes_data(store, ciphertext) == b""


def test_decrypt_too_short(store):
    with pytest.raises(ShortBufferError):
        decrypt_aes_data(store, b"\x00" * (AES_BLOCK_SIZE - 1))


def test_other_key_does_not_decrypt(tmp_path):
    first = PersistentStore(tmp_path / "a")
    second = PersistentStore(tmp_path / "b")
    plaintext = b"confidential payload"
    ciphertext = encrypt_aes_data(first, plaintext)
    recovered = decrypt_aes_data(second, ciphertext)
    assert len(recovered) == len(plaintext)
    assert recovered != plaintext
    assert decrypt_aes_data(first, ciphertext) == plaintext