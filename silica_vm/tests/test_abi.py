from __future__ import annotations

import cbor2
import pytest

from silica_vm.errors import (
    CallDataTooLarge,
    CallDataUnavailable,
    ContractError,
    DeserializationFailed,
    FatalError,
    ReturnDataTooLarge,
    SerializationFailed,
)
from silica_vm.runtime import abi


def test_decode_typed_fields(cfg):
    payload = abi.encode_args({"to": "bob", "amount": 5, "extra": "ignored"})
    assert abi.decode_args(payload, {"to": str, "amount": int}, config=cfg) == {"to": "bob", "amount": 5}


def test_decode_name_only_fields(cfg):
    payload = abi.encode_args({"data": b"\x01"})
    assert abi.decode_args(payload, ["data"], config=cfg) == {"data": b"\x01"}


def test_no_fields_accepts_empty_payload(cfg):
    assert abi.decode_args(b"", (), config=cfg) == {}
    assert abi.decode_args(abi.encode_args({}), {}, config=cfg) == {}


def test_empty_payload_with_fields(cfg):
    with pytest.raises(CallDataUnavailable):
        abi.decode_args(b"", {"to": str}, config=cfg)


def test_missing_and_mistyped_fields(cfg):
    payload = abi.encode_args({"to": "bob", "amount": "5"})
    with pytest.raises(DeserializationFailed, match="missing argument 'spender'"):
        abi.decode_args(payload, {"spender": str}, config=cfg)
    with pytest.raises(DeserializationFailed, match="must be int"):
        abi.decode_args(payload, {"amount": int}, config=cfg)


def test_bool_is_not_an_int(cfg):
    payload = abi.encode_args({"amount": True})
    with pytest.raises(DeserializationFailed):
        abi.decode_args(payload, {"amount": int}, config=cfg)


def test_malformed_and_non_map_payloads(cfg):
    with pytest.raises(DeserializationFailed):
        abi.decode_args(b"\x82\x01", {"a": int}, config=cfg)
    with pytest.raises(DeserializationFailed, match="must be a map"):
        abi.decode_args(cbor2.dumps([1, 2]), {"a": int}, config=cfg)


def test_call_data_bound_is_fatal(cfg):
    payload = b"\x00" * (cfg.max_call_data_bytes + 1)
    with pytest.raises(CallDataTooLarge) as ei:
        abi.decode_args(payload, {}, config=cfg)
    assert isinstance(ei.value, FatalError)
    assert not isinstance(ei.value, ContractError)
    assert ei.value.data == {"size": 4097, "limit": 4096}


def test_result_roundtrip_and_bound(cfg):
    assert abi.decode_result(abi.encode_result("0x0", config=cfg)) == "0x0"
    assert abi.decode_result(b"") is None
    with pytest.raises(ReturnDataTooLarge):
        abi.encode_result("x" * 5000, config=cfg)


def test_unencodable_result(cfg):
    with pytest.raises(SerializationFailed):
        abi.encode_result(object(), config=cfg)


def test_encode_args_requires_mapping():
    with pytest.raises(SerializationFailed):
        abi.encode_args([1, 2])  # type: ignore[arg-type]

