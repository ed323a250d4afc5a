"""Tests for the encrypted credential store"""

import pytest

from galynx.infrastructure.storage import SecureStore
from galynx.infrastructure.storage.secure_store import MAGIC
from galynx.shared.exceptions import StorageError
from tests.helpers.payloads import TEST_ITERATIONS


def reopen(path, secret="test-secret") -> SecureStore:
    return SecureStore(path, secret, iterations=TEST_ITERATIONS)


@pytest.mark.unit
def test_missing_file_is_empty_store(store):
    assert store.get("auth_tokens") is None


@pytest.mark.unit
def test_values_survive_reopen(store, store_path):
    store.set("auth_tokens", {"access_token": "a", "refresh_token": "r"})
    store.set("api_base", "http://api.test/api/v1")
    store.save()

    again = reopen(store_path)
    assert again.get("auth_tokens") == {"access_token": "a", "refresh_token": "r"}
    assert again.get("api_base") == "http://api.test/api/v1"


@pytest.mark.unit
def test_file_is_encrypted(store, store_path):
    store.set("auth_tokens", {"access_token": "very-secret-token"})
    store.save()

    blob = store_path.read_bytes()
    assert blob.startswith(MAGIC)
    assert b"very-secret-token" not in blob


@pytest.mark.unit
def test_changes_are_not_persisted_until_save(store, store_path):
    store.set("api_base", "http://api.test/api/v1")
    assert reopen(store_path).get("api_base") is None


@pytest.mark.unit
def test_delete_then_save_removes_key(store, store_path):
    store.set("api_base", "x")
    store.save()
    store.delete("api_base")
    store.delete("never-set")
    store.save()

    assert reopen(store_path).get("api_base") is None


@pytest.mark.unit
def test_wrong_secret_raises_storage_error(store, store_path):
    store.set("api_base", "x")
    store.save()

    with pytest.raises(StorageError):
        reopen(store_path, secret="other-secret").get("api_base")


@pytest.mark.unit
def test_tampered_file_raises_storage_error(store, store_path):
    store.set("api_base", "x")
    store.save()
    blob = bytearray(store_path.read_bytes())
    blob[-1] ^= 0xFF
    store_path.write_bytes(bytes(blob))

    with pytest.raises(StorageError):
        reopen(store_path).get("api_base")


@pytest.mark.unit
def test_garbage_file_raises_storage_error(store_path):
    store_path.write_bytes(b"not a store")

    with pytest.raises(StorageError):
        reopen(store_path).get("api_base")


@pytest.mark.unit
def test_save_replaces_atomically(store, store_path):
    store.set("api_base", "x")
    store.save()

    assert not store_path.with_name(store_path.name + ".tmp").exists()


@pytest.mark.unit
def test_unserializable_value_raises_storage_error(store):
    store.set("bad", object())

    with pytest.raises(StorageError):
        store.save()


@pytest.mark.unit
def test_empty_secret_rejected(store_path):
    with pytest.raises(ValueError):
        SecureStore(store_path, "")


@pytest.mark.unit
def test_write_over_unreadable_file_starts_empty(store, store_path):
    store.set("api_base", "x")
    store.save()
    stale = reopen(store_path, secret="rotated-secret")

    stale.set("auth_tokens", {"access_token": "a"})
    stale.save()

    again = reopen(store_path, secret="rotated-secret")
    assert again.get("auth_tokens") == {"access_token": "a"}
    assert again.get("api_base") is None


@pytest.mark.unit
def test_reset_discards_values(store, store_path):
    store.set("api_base", "x")
    store.save()

    store.reset()
    store.save()

    assert reopen(store_path).get("api_base") is None
