# offchain-vault

Encrypted, content-addressed storage for JSON documents sent by IoT devices.
It also produces signed attestation reports that identify the service instance
holding the data.

When you store a document, the vault:

1. Hashes the document with SHA-256. The lowercase hex digest becomes the
   document's identifier.
2. Encrypts the document with AES-256-CTR under a key kept in the vault, and
   puts a random 16-byte IV in front of the ciphertext.
3. Writes the encrypted document to a persistent object named after its hash.
   If an object with that hash already exists, the write is refused.

On first use the vault creates a 2048-bit RSA key pair and a 256-bit AES key.
Attestation reports are signed with RSASSA-PSS over SHA-256. Each report's data
string has this form:

```
{uuid:<service uuid>,counter:<n>,timestamp:<seconds>,nonce:<nonce hex>}
```

The report carries that string, its SHA-256 hash in hex and the signature in
hex.

Every command invocation updates the counter. The counter goes up by one when
the clock's whole-second value differs from the one recorded at the last update.
Several invocations within the same second therefore leave it unchanged.

## Installation

```
pip install offchain-vault
```

## Command line

```
offchain-vault store <iot_device_id> <json_data>
offchain-vault retrieve <json_hash>
offchain-vault hash <json_data>
offchain-vault attest
offchain-vault public-key
```

What each command does:

- `store` checks the input sizes. The device identifier may be at most 64
  bytes and the JSON data at most 7000 bytes. The command saves the string
  `iot_device_<id>:<json_data>` and prints the SHA-256 hash of that combined
  string.
- `retrieve` takes that hash and prints the stored data.
- `hash` prints the SHA-256 hash of its argument without storing anything.
- `attest` makes a fresh 32-byte random nonce and prints a signed report.
- `public-key` prints the RSA modulus followed by the public exponent, as hex.

Where the vault keeps its data:

- The directory named by the `OFFCHAIN_VAULT_HOME` environment variable, if
  it is set.
- Otherwise `~/.offchain_vault`.

Exit statuses:

| Status | Meaning |
| --- | --- |
| 0 | The command succeeded. |
| 1 | Usage errors, oversized input, or an unknown hash on `retrieve`. |
| 3 | `store` was given a document that is already stored. |

## Library use

```python
from offchain_vault.service import Command, SecureStorageService

service = SecureStorageService("/var/lib/offchain-vault")
digest = service.store_json("sensor-0001", b'{"t": 21.5}')
assert service.retrieve_json(digest) == b'{"t": 21.5}'
assert service.hash_json(b'{"t": 21.5}') == digest

report = service.get_attestation(bytes(32))
print(report.data, report.hash, report.signature)
print(service.get_public_key())

# The same operations by command number:
service.invoke(Command.HASH_JSON, b"{}")
```

`SecureStorageService` also takes a `clock` argument, a function that returns
seconds as a float and defaults to `time.time`. It drives the counter.

Lower-level pieces:

- `offchain_vault.storage.PersistentStore` is a directory of named binary
  objects. Object identifiers are 1 to 64 bytes long.
- `offchain_vault.counter.Counter` is the persisted counter.
- `offchain_vault.crypto` holds the hashing, key and AES-CTR helpers.
- `offchain_vault.attestation.get_code_attestation` builds a report.
- `offchain_vault.hexstr` holds the hex and UUID formatting.

## Errors

Failures raise subclasses of `offchain_vault.storage.TeeError`. Each one has a
numeric `code` attribute.

| Exception | Raised when |
| --- | --- |
| `BadParametersError` | the arguments are malformed, for example a nonce that is not 32 bytes, a wrong argument count or an invalid object id |
| `ShortBufferError` | a size does not fit, for example a ciphertext shorter than its IV |
| `ItemNotFoundError` | no object is stored under the given name or hash |
| `AccessConflictError` | an object with that name already exists |
| `CorruptObjectError` | stored counter state or keys cannot be read back |

Calling `invoke` with an unknown command number raises a plain `TeeError`.

## What it does not do

The keys are not protected by any isolated execution environment. The RSA key
pair and the AES key are stored unencrypted as files in the storage directory,
next to the encrypted documents. Anyone who can read that directory can decrypt
the documents and forge reports.

Stored documents cannot be deleted or replaced through the service or the
command line.