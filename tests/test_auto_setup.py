"""Tests for accounts that initialise themselves on first use."""

import pytest
from ethereum_types.numeric import U256, Uint

from rootless.abi import selector
from rootless.commitment import encode_setup_call
from rootless.contracts.lifecycle import IMPLEMENTATION_SLOT, PROXY_CREATION
from rootless.contracts.wallet import (
    GET_OWNERS,
    GET_THRESHOLD,
    IS_OWNER,
    SETUP_PERFORMED,
    VALUE_RECEIVED,
)
from rootless.fork import Transaction, process_transaction, static_call
from rootless.fork_types import NULL_ADDRESS, SetupParameters
from rootless.state import get_account, get_storage
from rootless.utils.address import address_to_word
from rootless.vm import BlockEnvironment
from rootless.vm.exceptions import WriteInStaticContext

from .conftest import AUTO_PROXY_ADDRESS, SENDER, WALLET_ADDRESS, MinedFactory


def test_read_only_call_cannot_activate(
    block_env: BlockEnvironment,
    activate: MinedFactory,
    setup: SetupParameters,
) -> None:
    """Probing an account that was never used fails."""
    _, mined = activate(setup, delegate=AUTO_PROXY_ADDRESS)

    receipt = static_call(
        block_env, SENDER, mined.account, GET_OWNERS.encode_call()
    )

    assert isinstance(receipt.error, WriteInStaticContext)
    assert (
        get_storage(block_env.state, mined.account, IMPLEMENTATION_SLOT) == 0
    )


def test_first_transfer_activates_account(
    block_env: BlockEnvironment,
    activate: MinedFactory,
    setup: SetupParameters,
) -> None:
    """
    The first message sets the account up as its own sole owner, then is
    handled by the wallet.
    """
    _, mined = activate(setup, delegate=AUTO_PROXY_ADDRESS)
    account = mined.account

    receipt = process_transaction(
        block_env, Transaction(sender=SENDER, to=account, value=U256(10))
    )

    assert receipt.succeeded, receipt.error
    assert len(receipt.logs) == 3
    assert SETUP_PERFORMED.decode(receipt.logs[0]) == (
        account,
        (account,),
        1,
        NULL_ADDRESS,
        NULL_ADDRESS,
    )
    assert PROXY_CREATION.decode(receipt.logs[1]) == (account, WALLET_ADDRESS)
    assert VALUE_RECEIVED.decode(receipt.logs[2]) == (SENDER, 10)
    assert all(log.address == account for log in receipt.logs)

    assert get_account(block_env.state, account).balance == 10
    assert get_storage(
        block_env.state, account, IMPLEMENTATION_SLOT
    ) == address_to_word(WALLET_ADDRESS)

    owners = static_call(block_env, SENDER, account, GET_OWNERS.encode_call())
    assert GET_OWNERS.decode_result(owners.output) == ((account,),)
    threshold = static_call(
        block_env, SENDER, account, GET_THRESHOLD.encode_call()
    )
    assert GET_THRESHOLD.decode_result(threshold.output) == (1,)


def test_activation_happens_once(
    block_env: BlockEnvironment,
    activate: MinedFactory,
    setup: SetupParameters,
) -> None:
    """Later messages go straight to the wallet."""
    _, mined = activate(setup, delegate=AUTO_PROXY_ADDRESS)
    first = process_transaction(
        block_env, Transaction(sender=SENDER, to=mined.account)
    )
    assert first.succeeded

    second = process_transaction(
        block_env, Transaction(sender=SENDER, to=mined.account, value=U256(1))
    )

    assert second.succeeded
    assert [VALUE_RECEIVED.matches(log) for log in second.logs] == [True]


@pytest.mark.parametrize(
    "data,output",
    [
        pytest.param(IS_OWNER.selector, b"", id="malformed_call"),
        pytest.param(
            encode_setup_call(
                SetupParameters(owners=(SENDER,), threshold=Uint(1))
            ),
            selector("AlreadyInitialized()"),
            id="second_setup",
        ),
    ],
)
def test_failed_first_call_undoes_activation(
    block_env: BlockEnvironment,
    activate: MinedFactory,
    setup: SetupParameters,
    data: bytes,
    output: bytes,
) -> None:
    """If the forwarded first message fails, the activation fails with it."""
    _, mined = activate(setup, delegate=AUTO_PROXY_ADDRESS)

    receipt = process_transaction(
        block_env,
        Transaction(sender=SENDER, to=mined.account, value=U256(3), data=data),
    )

    assert not receipt.succeeded
    assert receipt.output == output
    assert receipt.logs == ()
    assert (
        get_storage(block_env.state, mined.account, IMPLEMENTATION_SLOT) == 0
    )
    assert get_account(block_env.state, mined.account).balance == 0
    assert block_env.state._snapshots == []


def test_deployment_is_never_activated(block_env: BlockEnvironment) -> None:
    """Calls made on the deployment itself do not set it up."""
    transfer = process_transaction(
        block_env, Transaction(sender=SENDER, to=AUTO_PROXY_ADDRESS)
    )
    direct_call = process_transaction(
        block_env,
        Transaction(
            sender=SENDER,
            to=AUTO_PROXY_ADDRESS,
            data=GET_OWNERS.encode_call(),
        ),
    )

    assert transfer.succeeded
    assert transfer.logs == ()
    assert not direct_call.succeeded
    assert (
        get_storage(block_env.state, AUTO_PROXY_ADDRESS, IMPLEMENTATION_SLOT)
        == 0
    )
