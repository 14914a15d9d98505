from __future__ import annotations

import pytest

from vm_abi.codec.param_types import BOOL, U32, U64, U8, ArrayType, EnumType, EnumVariants, StringType, StructType
from vm_abi.codec.tokens import Token
from vm_abi.codec.words import pad_word
from vm_abi.errors import InvalidData
from vm_abi.receipts import Log, LogData, LogDecoder, Return, ReturnData, decode_return, receipt_from_dict

MY_STRUCT = StructType((ArrayType(U8, 2), StringType(4)), name="MyStruct", field_names=("foo", "bar"))
MY_ENUM = EnumType(EnumVariants((U32, BOOL), ("X", "Y")), name="MyEnum")
STRUCT_BYTES = pad_word(10) + pad_word(2) + b"fuel\x00\x00\x00\x00"


@pytest.fixture
def decoder() -> LogDecoder:
    return LogDecoder({0: U64, 1: MY_STRUCT, 2: U64, 3: MY_ENUM})


def test_logs_with_type_in_receipt_order(decoder):
    receipts = [
        Log(0, 7),
        LogData(1, STRUCT_BYTES),
        Return(0),
        Log(2, 9),
        Log(9, 1),  # undeclared id
    ]
    assert decoder.logs_with_type(receipts, U64) == [Token.u64(7), Token.u64(9)]
    (s,) = decoder.logs_with_type(receipts, MY_STRUCT)
    assert s == Token.struct([Token.array([Token.u8(10), Token.u8(2)]), Token.string("fuel", 4)])


def test_logs_with_type_no_match(decoder):
    assert decoder.logs_with_type([Log(0, 1)], BOOL) == []
    assert decoder.logs_with_type([], U64) == []


def test_fetch_logs_renders_every_known_log(decoder):
    receipts = [Log(0, 7), LogData(3, pad_word(1) + pad_word(1)), Log(42, 0), LogData(1, STRUCT_BYTES)]
    assert decoder.fetch_logs(receipts) == [
        "7",
        "{'Y': True}",
        "{'foo': [10, 2], 'bar': 'fuel'}",
    ]


def test_malformed_log_data(decoder):
    with pytest.raises(InvalidData):
        decoder.logs_with_type([LogData(1, b"\x00" * 4)], MY_STRUCT)


def test_decode_return_variants():
    assert decode_return([Log(0, 1), Return(42)], U64) == Token.u64(42)
    assert decode_return([ReturnData(STRUCT_BYTES)], MY_STRUCT).kind.value == "Struct"
    assert decode_return([], U64) == Token.u64(0)


def test_receipt_from_dict():
    assert receipt_from_dict({"type": "Log", "logId": 1, "value": 5}) == Log(1, 5)
    assert receipt_from_dict({"type": "LogData", "logId": 2, "data": "0x0102"}) == LogData(2, b"\x01\x02")
    assert receipt_from_dict({"type": "Return", "value": 3}) == Return(3)
    assert receipt_from_dict({"type": "ReturnData", "data": "ff"}) == ReturnData(b"\xff")
    with pytest.raises(InvalidData):
        receipt_from_dict({"type": "Panic"})
    with pytest.raises(InvalidData):
        receipt_from_dict({"type": "Log", "logId": 1})
    with pytest.raises(InvalidData):
        receipt_from_dict({"type": "LogData", "logId": 1, "data": "0xzz"})
    with pytest.raises(InvalidData):
        receipt_from_dict(["Log", 1, 5])


@pytest.mark.parametrize("receipt", [Log(0, -1), Return(2**64)])
def test_out_of_range_register_value_is_invalid_data(receipt):
    with pytest.raises(InvalidData) as ei:
        receipt.payload()
    assert "value" in ei.value.context
