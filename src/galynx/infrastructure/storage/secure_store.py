"""SecureStore - encrypted JSON key/value file

File layout: MAGIC | salt(16) | nonce(12) | tag(16) | ciphertext

The plaintext is a JSON object. Encryption is AES-256-GCM with a key
derived from the store secret by PBKDF2-HMAC-SHA256 over the per-file salt.
"""

import json
import os
import threading
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any

from Crypto.Cipher import AES
from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2
from Crypto.Random import get_random_bytes
from loguru import logger

from galynx.shared.exceptions import StorageError

MAGIC = b"GLX1"
SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32
HEADER_SIZE = len(MAGIC) + SALT_SIZE + NONCE_SIZE + TAG_SIZE


class SecureStore:
    """Encrypted on-disk key/value store for credentials

    Responsibilities:
    - Lazy load + decrypt on first access
    - get/set/delete against the in-memory map
    - Writes over an unreadable file start from an empty map (reads raise)
    - save() encrypts and atomically replaces the file

    Thread-safe: every public method holds the store lock, so the store
    can be driven from asyncio.to_thread workers.
    """

    DEFAULT_ITERATIONS = 200_000

    def __init__(
        self,
        path: str | Path,
        secret: str,
        iterations: int = DEFAULT_ITERATIONS,
    ) -> None:
        """Initialize store (no I/O happens until first access)

        Args:
            path: File backing the store
            secret: Secret the encryption key is derived from
            iterations: PBKDF2 iteration count
        """
        if not secret:
            raise ValueError("SecureStore secret must not be empty")

        self._path = Path(path)
        self._secret = secret
        self._iterations = iterations
        self._lock = threading.RLock()
        self._data: dict[str, Any] | None = None
        self._salt: bytes | None = None
        self._key: bytes | None = None
        self._key_salt: bytes | None = None

    @property
    def path(self) -> Path:
        return self._path

    def batch(self) -> AbstractContextManager:
        """Hold the store lock across several get/set/delete/save calls"""
        return self._lock

    def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None if absent

        Raises:
            StorageError: If the file is corrupt or cannot be decrypted
        """
        with self._lock:
            return self._ensure_loaded().get(key)

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value (in memory until save())"""
        with self._lock:
            self._ensure_writable()[key] = value

    def delete(self, key: str) -> None:
        """Remove key if present (in memory until save())"""
        with self._lock:
            self._ensure_writable().pop(key, None)

    def save(self) -> None:
        """Encrypt the current map and atomically replace the file

        Raises:
            StorageError: If serialization or the write fails
        """
        with self._lock:
            data = self._ensure_writable()
            try:
                plaintext = json.dumps(data).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise StorageError(f"could not serialize store: {e}") from e

            if self._salt is None:
                self._salt = get_random_bytes(SALT_SIZE)
            blob = self._encrypt(plaintext, self._salt)

            tmp_path = self._path.with_name(self._path.name + ".tmp")
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, "wb") as f:
                    f.write(blob)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self._path)
            except OSError as e:
                raise StorageError(f"could not write {self._path}: {e}") from e

            logger.debug(f"Secure store saved to {self._path}")

    def reset(self) -> None:
        """Discard all values and start over with a fresh salt

        The file is replaced on the next save().
        """
        with self._lock:
            self._data = {}
            self._salt = get_random_bytes(SALT_SIZE)

    def ensure_writable(self) -> None:
        """Load the file, resetting to an empty store if it cannot be read"""
        with self._lock:
            self._ensure_writable()

    def _ensure_loaded(self) -> dict[str, Any]:
        if self._data is None:
            self._data = self._load()
        return self._data

    def _ensure_writable(self) -> dict[str, Any]:
        if self._data is None:
            try:
                self._data = self._load()
            except StorageError as e:
                logger.warning(f"Secure store unreadable, starting empty: {e}")
                self.reset()
        return self._data

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            logger.debug(f"Secure store {self._path} not found, starting empty")
            return {}

        try:
            blob = self._path.read_bytes()
        except OSError as e:
            raise StorageError(f"could not read {self._path}: {e}") from e

        if len(blob) < HEADER_SIZE or not blob.startswith(MAGIC):
            raise StorageError(f"{self._path} is not a secure store file")

        offset = len(MAGIC)
        salt = blob[offset : offset + SALT_SIZE]
        offset += SALT_SIZE
        nonce = blob[offset : offset + NONCE_SIZE]
        offset += NONCE_SIZE
        tag = blob[offset : offset + TAG_SIZE]
        ciphertext = blob[offset + TAG_SIZE :]

        cipher = AES.new(self._derive_key(salt), AES.MODE_GCM, nonce=nonce)
        try:
            plaintext = cipher.decrypt_and_verify(ciphertext, tag)
        except ValueError as e:
            raise StorageError(
                f"could not decrypt {self._path}: authentication failed"
            ) from e

        try:
            data = json.loads(plaintext)
        except ValueError as e:
            raise StorageError(f"could not decode {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} does not hold a JSON object")

        self._salt = salt
        return data

    def _derive_key(self, salt: bytes) -> bytes:
        if self._key is None or self._key_salt != salt:
            self._key = PBKDF2(
                self._secret,
                salt,
                dkLen=KEY_SIZE,
                count=self._iterations,
                hmac_hash_module=SHA256,
            )
            self._key_salt = salt
        return self._key

    def _encrypt(self, plaintext: bytes, salt: bytes) -> bytes:
        cipher = AES.new(
            self._derive_key(salt),
            AES.MODE_GCM,
            nonce=get_random_bytes(NONCE_SIZE),
        )
        ciphertext, tag = cipher.encrypt_and_digest(plaintext)
        return MAGIC + salt + cipher.nonce + tag + ciphertext
