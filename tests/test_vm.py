"""Tests for message execution, rollback and delegation resolution."""

from typing import List, Tuple

import pytest
from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256

from rootless.abi import Event
from rootless.contracts import Program, deploy
from rootless.exceptions import InvalidTransaction
from rootless.fork import (
    Receipt,
    Transaction,
    process_transaction,
    static_call,
)
from rootless.fork_types import Address
from rootless.state import get_account, get_storage, set_code
from rootless.utils.hexadecimal import hex_to_address
from rootless.vm import BlockEnvironment, Evm
from rootless.vm.eoa_delegation import (
    delegation_designation,
    get_delegated_code_address,
    is_valid_delegation,
)
from rootless.vm.exceptions import Revert, WriteInStaticContext
from rootless.vm.instructions.log import emit
from rootless.vm.instructions.storage import sstore
from rootless.vm.instructions.system import call, staticcall

from .conftest import SENDER
from .programs import Echo

PARENT = hex_to_address("0x2000000000000000000000000000000000000001")
CHILD = hex_to_address("0x2000000000000000000000000000000000000002")
DELEGATOR = hex_to_address("0x2000000000000000000000000000000000000003")
SLOT = U256(1).to_be_bytes32()
TOUCHED = Event("Touched(uint256)")


class Toucher(Program):
    """Writes a slot and emits a log, then reverts if asked to."""

    def __init__(self, address: Address, fail: bool):
        super().__init__(address)
        self.fail = fail

    def execute(self, evm: Evm) -> Bytes:  # noqa: D102
        sstore(evm, SLOT, U256(1))
        emit(evm, TOUCHED, 1)
        if self.fail:
            raise Revert(b"\x01")
        return b""


class Caller(Program):
    """Touches its own state, then calls `callee` and records the result."""

    def __init__(self, address: Address, callee: Address, value: int = 0):
        super().__init__(address)
        self.callee = callee
        self.value = U256(value)
        self.results: List[Tuple[bool, Bytes]] = []

    def execute(self, evm: Evm) -> Bytes:  # noqa: D102
        sstore(evm, SLOT, U256(2))
        emit(evm, TOUCHED, 2)
        self.results.append(call(evm, self.callee, b"", self.value))
        return b""


class Prober(Program):
    """Read-only calls `callee` and records the result."""

    def __init__(self, address: Address, callee: Address):
        super().__init__(address)
        self.callee = callee
        self.results: List[Tuple[bool, Bytes]] = []

    def execute(self, evm: Evm) -> Bytes:  # noqa: D102
        self.results.append(staticcall(evm, self.callee, b""))
        return b""


class Crasher(Program):
    """Writes a slot, then fails with an unexpected error."""

    def execute(self, evm: Evm) -> Bytes:  # noqa: D102
        sstore(evm, SLOT, U256(1))
        raise RuntimeError("crashed")


def send(
    block_env: BlockEnvironment, to: Address, value: int = 0
) -> Receipt:
    """Send a transaction from the funded sender."""
    return process_transaction(
        block_env, Transaction(sender=SENDER, to=to, value=U256(value))
    )


def test_failed_child_call_is_rolled_back(
    block_env: BlockEnvironment,
) -> None:
    """A failing callee loses its writes and logs, the caller keeps its own."""
    caller = deploy(block_env.state, Caller(PARENT, CHILD))
    deploy(block_env.state, Toucher(CHILD, fail=True))

    receipt = send(block_env, PARENT)

    assert receipt.succeeded
    assert caller.results == [(False, b"\x01")]
    assert [TOUCHED.decode(log) for log in receipt.logs] == [(2,)]
    assert get_storage(block_env.state, PARENT, SLOT) == 2
    assert get_storage(block_env.state, CHILD, SLOT) == 0


def test_successful_child_call_is_kept(block_env: BlockEnvironment) -> None:
    """Logs of a successful callee follow the caller's logs."""
    deploy(block_env.state, Caller(PARENT, CHILD))
    deploy(block_env.state, Toucher(CHILD, fail=False))

    receipt = send(block_env, PARENT)

    assert [TOUCHED.decode(log) for log in receipt.logs] == [(2,), (1,)]
    assert [log.address for log in receipt.logs] == [PARENT, CHILD]
    assert get_storage(block_env.state, CHILD, SLOT) == 1


def test_failed_transaction_discards_everything(
    block_env: BlockEnvironment,
) -> None:
    """A failing transaction keeps no logs, writes or value transfer."""
    deploy(block_env.state, Toucher(CHILD, fail=True))

    receipt = send(block_env, CHILD, value=7)

    assert not receipt.succeeded
    assert isinstance(receipt.error, Revert)
    assert receipt.output == b"\x01"
    assert receipt.logs == ()
    assert get_storage(block_env.state, CHILD, SLOT) == 0
    assert get_account(block_env.state, CHILD).balance == 0
    assert get_account(block_env.state, SENDER).nonce == 1


def test_call_with_insufficient_balance_fails(
    block_env: BlockEnvironment,
) -> None:
    """A program cannot send value it does not hold."""
    caller = deploy(block_env.state, Caller(PARENT, CHILD, value=5))

    receipt = send(block_env, PARENT)

    assert receipt.succeeded
    assert caller.results == [(False, b"")]
    assert get_account(block_env.state, CHILD).balance == 0


def test_value_transfer_reaches_callee(block_env: BlockEnvironment) -> None:
    """Value forwarded by a program moves between the accounts."""
    deploy(block_env.state, Caller(PARENT, CHILD, value=5))

    receipt = send(block_env, PARENT, value=5)

    assert receipt.succeeded
    assert get_account(block_env.state, PARENT).balance == 0
    assert get_account(block_env.state, CHILD).balance == 5


def test_static_call_cannot_write(block_env: BlockEnvironment) -> None:
    """State changes are rejected inside a read-only call."""
    deploy(block_env.state, Toucher(CHILD, fail=False))

    receipt = static_call(block_env, SENDER, CHILD)

    assert isinstance(receipt.error, WriteInStaticContext)
    assert receipt.output == b""


def test_static_call_leaves_no_trace(block_env: BlockEnvironment) -> None:
    """Nothing a read-only call does survives it."""
    deploy(block_env.state, Echo(CHILD))

    receipt = static_call(block_env, SENDER, CHILD, b"\xab\xcd")

    assert receipt.succeeded
    assert receipt.output == b"\xab\xcd"
    assert get_account(block_env.state, SENDER).nonce == 0


def test_delegation_is_followed_once(block_env: BlockEnvironment) -> None:
    """Calls to a delegating account run the delegate's program."""
    deploy(block_env.state, Echo(CHILD))
    set_code(block_env.state, DELEGATOR, delegation_designation(CHILD))
    set_code(block_env.state, PARENT, delegation_designation(DELEGATOR))

    direct = static_call(block_env, SENDER, DELEGATOR, b"\x01")
    chained = static_call(block_env, SENDER, PARENT, b"\x01")

    assert direct.output == b"\x01"
    assert chained.succeeded
    assert chained.output == b""


def test_delegation_designation() -> None:
    """Designations are the marker followed by the delegate."""
    code = delegation_designation(CHILD)

    assert code == bytes.fromhex("ef0100") + CHILD
    assert is_valid_delegation(code)
    assert get_delegated_code_address(code) == CHILD
    assert not is_valid_delegation(code[:-1])
    assert get_delegated_code_address(b"\x60\x00") is None


def test_staticcall_from_program_cannot_write(
    block_env: BlockEnvironment,
) -> None:
    """A program's read-only call fails when the callee writes."""
    prober = deploy(block_env.state, Prober(PARENT, CHILD))
    deploy(block_env.state, Toucher(CHILD, fail=False))

    receipt = send(block_env, PARENT)

    assert receipt.succeeded
    assert prober.results == [(False, b"")]
    assert get_storage(block_env.state, CHILD, SLOT) == 0


@pytest.mark.parametrize(
    "sender,value",
    [
        pytest.param(PARENT, 0, id="contract_sender"),
        pytest.param(SENDER, 10**19, id="insufficient_balance"),
    ],
)
def test_invalid_transaction(
    block_env: BlockEnvironment, sender: Address, value: int
) -> None:
    """Transactions that cannot be paid for are rejected outright."""
    deploy(block_env.state, Echo(PARENT))

    with pytest.raises(InvalidTransaction):
        process_transaction(
            block_env,
            Transaction(sender=sender, to=CHILD, value=U256(value)),
        )

    assert get_account(block_env.state, SENDER).nonce == 0


@pytest.mark.parametrize(
    "to",
    [
        pytest.param(CHILD, id="direct"),
        pytest.param(PARENT, id="nested"),
    ],
)
def test_unexpected_error_rolls_back(
    block_env: BlockEnvironment, to: Address
) -> None:
    """Errors that are not reverts propagate, with every frame undone."""
    deploy(block_env.state, Caller(PARENT, CHILD))
    deploy(block_env.state, Crasher(CHILD))

    with pytest.raises(RuntimeError):
        send(block_env, to)

    assert block_env.state._snapshots == []
    assert get_storage(block_env.state, PARENT, SLOT) == 0
    assert get_storage(block_env.state, CHILD, SLOT) == 0
