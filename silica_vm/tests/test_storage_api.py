from __future__ import annotations

import dataclasses

import pytest

from silica_vm.errors import DeserializationFailed, SerializationFailed, StorageError
from silica_vm.runtime.storage_api import Map, MemoryBackend, Storage, StorageBackend, encode_key, encode_value


def test_memory_backend_satisfies_protocol():
    assert isinstance(MemoryBackend(), StorageBackend)


def test_get_set_has_delete(storage: Storage):
    assert storage.get("metadata") is None
    assert storage.get("metadata", 0) == 0
    assert not storage.has("metadata")

    storage.set("metadata", {"name": "Chert Token", "decimals": 18})
    assert storage.has("metadata")
    assert storage.get("metadata") == {"name": "Chert Token", "decimals": 18}

    storage.set("metadata", {"name": "other"})
    assert storage.get("metadata") == {"name": "other"}

    storage.delete("metadata")
    assert not storage.has("metadata")
    storage.delete("metadata")  # no-op


def test_falsy_values_are_present(storage: Storage):
    storage.set("zero", 0)
    storage.set("flag", False)
    storage.set("empty", "")
    assert storage.has("zero") and storage.get("zero") == 0
    assert storage.get("flag") is False
    assert storage.get("empty") == ""


def test_none_is_rejected(storage: Storage):
    with pytest.raises(StorageError):
        storage.set("k", None)


def test_maps_are_namespaced(storage: Storage):
    balances = Map(storage, "balances")
    allowances = Map(storage, "allowances")

    balances.set("alice", 10)
    allowances.set(("alice", "bob"), 3)

    assert balances.get("alice") == 10
    assert allowances.get("alice") is None
    assert allowances.get(("alice", "bob")) == 3
    assert allowances.get(("bob", "alice"), 0) == 0
    assert "alice" in balances
    assert storage.get(("balances", "alice")) == 10


def test_int_and_str_keys_do_not_collide(storage: Storage):
    tokens = Map(storage, "tokens")
    tokens.set(1, "int")
    tokens.set("1", "str")
    assert tokens.get(1) == "int"
    assert tokens.get("1") == "str"


def test_key_encoding_is_canonical():
    assert encode_key(("allowances", ("a", "b"))) == encode_key(("allowances", ("a", "b")))
    assert encode_value({"b": 1, "a": 2}) == encode_value({"a": 2, "b": 1})


@pytest.mark.parametrize("bad", [1.5, b"raw", None, True, ("ok", 2.0)])
def test_bad_key_types(storage: Storage, bad):
    with pytest.raises(StorageError):
        storage.get(bad)


def test_key_and_value_caps(backend: MemoryBackend, cfg):
    small = dataclasses.replace(cfg, max_storage_key_bytes=16, max_storage_value_bytes=64)
    st = Storage(backend, config=small)

    with pytest.raises(StorageError) as ei:
        st.set("k" * 40, 1)
    assert ei.value.data["limit"] == 16

    with pytest.raises(StorageError):
        st.set("k", "x" * 100)
    assert len(backend) == 0


def test_unencodable_value(storage: Storage):
    with pytest.raises(SerializationFailed):
        storage.set("k", object())


def test_corrupt_value(storage: Storage, backend: MemoryBackend):
    backend.set(encode_key("k"), b"\x82\x01")  # array(2) with one item
    with pytest.raises(DeserializationFailed):
        storage.get("k")


def test_map_prefix_must_be_non_empty(storage: Storage):
    with pytest.raises(StorageError):
        Map(storage, "")


def test_backend_items_sorted():
    b = MemoryBackend({b"\x02": b"b", b"\x01": b"a"})
    assert list(b.items()) == [(b"\x01", b"a"), (b"\x02", b"b")]
