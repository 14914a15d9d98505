from __future__ import annotations

import pytest

from vm_abi.call import CONTRACT_ID_LEN, encode_call, needs_extra_offset_word
from vm_abi.codec.param_types import U32
from vm_abi.codec.selector import compute_selector
from vm_abi.codec.tokens import Token
from vm_abi.codec.words import pad_word
from vm_abi.errors import InvalidData

SELECTOR = compute_selector("takes_ints_returns_bool", [U32])


def test_single_word_arguments_need_no_offset_word():
    call = encode_call(SELECTOR, [Token.u32(42), Token.bool(True)])
    assert not call.needs_extra_offset_word
    assert call.to_bytes().hex() == "000000009593586c" "000000000000002a" "0000000000000001"


@pytest.mark.parametrize(
    "token",
    [
        Token.b256(b"\x00" * 32),
        Token.string("fuel", 4),
        Token.array([Token.u8(1)]),
        Token.struct([Token.u8(1)]),
        Token.tuple([Token.u8(1)]),
        Token.vector([]),
    ],
)
def test_reference_arguments_need_offset_word(token):
    assert needs_extra_offset_word([Token.u8(1), token])


def test_offset_word_points_at_arguments():
    call = encode_call(SELECTOR, [Token.struct([Token.u64(1), Token.u64(2)])])
    blob = call.to_bytes(1000)
    assert blob[:8] == SELECTOR
    assert blob[8:16] == pad_word(1016)
    assert blob[16:] == pad_word(1) + pad_word(2)


def test_vector_pointers_resolved_against_argument_address():
    call = encode_call(SELECTOR, [Token.vector([Token.u8(5)])])
    blob = call.to_bytes(0)
    args_addr = 16
    assert blob[8:16] == pad_word(args_addr)
    # pointer, cap, len, element
    assert blob[16:24] == pad_word(args_addr + 24)
    assert blob[40:48] == pad_word(5)


def test_script_data_prefixes_contract_id():
    contract_id = bytes(range(CONTRACT_ID_LEN))
    call = encode_call(SELECTOR, [Token.tuple([Token.u8(1)])])
    data = call.script_data(contract_id, 10240)
    assert data[:32] == contract_id
    assert data[32:40] == SELECTOR
    assert data[40:48] == pad_word(10240 + 32 + 16)


def test_bad_lengths():
    with pytest.raises(InvalidData):
        encode_call(b"\x01\x02", [])
    call = encode_call(SELECTOR, [])
    with pytest.raises(InvalidData):
        call.script_data(b"\x00" * 31, 0)
