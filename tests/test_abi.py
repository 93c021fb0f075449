"""Tests for the ABI helpers."""

import pytest
from eth_abi import encode
from ethereum_types.numeric import U8, U256, Uint

from rootless.abi import Event, Function, encode_values, selector
from rootless.utils.hexadecimal import hex_to_address
from rootless.vm.exceptions import Revert

HOLDER = hex_to_address("0x000000000000000000000000000000000000beef")
TRANSFER = Function("transfer(address,uint256)", outputs=("bool",))


def test_encode_fixed_width_integers() -> None:
    """Integers of the ledger's own types encode like plain integers."""
    encoded = encode_values(
        ["uint256", "uint8[]", "uint256"],
        [U256(5), [U8(1), U8(2)], Uint(7)],
    )

    assert encoded == encode(["uint256", "uint8[]", "uint256"], [5, [1, 2], 7])


def test_function_call_round_trip() -> None:
    """Arguments decode back to addresses and integers."""
    data = TRANSFER.encode_call(HOLDER, U256(10))

    assert data[:4] == selector("transfer(address,uint256)")
    assert TRANSFER.matches(data)
    assert TRANSFER.decode_arguments(data) == (HOLDER, 10)


@pytest.mark.parametrize(
    "data",
    [
        pytest.param(TRANSFER.selector, id="selector_only"),
        pytest.param(
            TRANSFER.encode_call(HOLDER, U256(10))[:-1], id="truncated"
        ),
    ],
)
def test_malformed_calldata_reverts(data: bytes) -> None:
    """Calldata that does not decode is a revert without output."""
    with pytest.raises(Revert) as info:
        TRANSFER.decode_arguments(data)

    assert info.value.output == b""


def test_event_topics() -> None:
    """Indexed parameters become topics, the rest is data."""
    event = Event("Moved(address,uint256)", indexed=(True,))

    log = event.build(HOLDER, HOLDER, U256(3))

    assert log.topics[0] == event.topic
    assert log.topics[1] == b"\x00" * 12 + HOLDER
    assert event.decode(log) == (HOLDER, 3)
