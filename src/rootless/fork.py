"""
Transaction processing.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Entry points into the ledger: `process_transaction` runs a state changing
transaction and `static_call` runs a read-only query whose effects are
always thrown away.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U64, U256, Uint

from .exceptions import InvalidTransaction, RootlessException
from .fork_types import Address, Authorization, Log
from .logging import get_logger
from .state import (
    State,
    begin_transaction,
    get_account,
    increment_nonce,
    rollback_transaction,
)
from .vm import BlockEnvironment, Message, TransactionEnvironment
from .vm.eoa_delegation import is_valid_delegation
from .vm.interpreter import process_message_call

logger = get_logger(__name__)

DEFAULT_CHAIN_ID = U64(1)


@dataclass
class Transaction:
    """
    A message call sent by `sender`, optionally setting the code of the
    accounts named in `authorizations` first.
    """

    sender: Address
    to: Address
    value: U256 = U256(0)
    data: Bytes = b""
    authorizations: Tuple[Authorization, ...] = ()


@dataclass
class Receipt:
    """
    Result of a transaction or static call.
    """

    succeeded: bool
    output: Bytes
    logs: Tuple[Log, ...]
    error: Optional[RootlessException]
    authorities: Tuple[Address, ...] = ()


def new_block_environment(
    state: Optional[State] = None, chain_id: U64 = DEFAULT_CHAIN_ID
) -> BlockEnvironment:
    """
    Create an environment over `state`, or over a fresh empty state.
    """
    if state is None:
        state = State()
    return BlockEnvironment(chain_id=chain_id, state=state)


def _prepare_message(
    block_env: BlockEnvironment,
    tx_env: TransactionEnvironment,
    caller: Address,
    to: Address,
    value: U256,
    data: Bytes,
    is_static: bool,
) -> Message:
    return Message(
        block_env=block_env,
        tx_env=tx_env,
        caller=caller,
        target=to,
        current_target=to,
        value=value,
        data=data,
        code_address=None,
        depth=Uint(0),
        should_transfer_value=True,
        is_static=is_static,
        parent_evm=None,
    )


def check_transaction(state: State, tx: Transaction) -> None:
    """
    Check that the transaction can be executed at all.

    Raises
    ------
    InvalidTransaction
        If the sender is a contract or cannot cover the value sent.

    """
    sender_account = get_account(state, tx.sender)
    if sender_account.program is not None or (
        sender_account.code and not is_valid_delegation(sender_account.code)
    ):
        raise InvalidTransaction("sender is not an externally owned account")
    if sender_account.balance < tx.value:
        raise InvalidTransaction("insufficient sender balance")


def process_transaction(
    block_env: BlockEnvironment, tx: Transaction
) -> Receipt:
    """
    Execute a transaction against the state.

    Parameters
    ----------
    block_env :
        Environment for the Ethereum Virtual Machine.
    tx :
        Transaction to execute.

    Returns
    -------
    receipt : `Receipt`
        Whether the call succeeded, its output and its logs.

    """
    state = block_env.state
    check_transaction(state, tx)
    increment_nonce(state, tx.sender)

    tx_env = TransactionEnvironment(
        origin=tx.sender,
        authorizations=tx.authorizations,
    )
    message = _prepare_message(
        block_env, tx_env, tx.sender, tx.to, tx.value, tx.data, False
    )
    output = process_message_call(message)

    if output.error is not None:
        logger.verbose(
            "transaction to 0x%s failed: %r", tx.to.hex(), output.error
        )

    return Receipt(
        succeeded=output.error is None,
        output=output.return_data,
        logs=output.logs,
        error=output.error,
        authorities=output.authorities,
    )


def static_call(
    block_env: BlockEnvironment,
    caller: Address,
    to: Address,
    data: Bytes = b"",
) -> Receipt:
    """
    Run a read-only call. Any attempt to modify state fails the call, and
    the state is left exactly as it was either way.
    """
    state = block_env.state
    tx_env = TransactionEnvironment(origin=caller, authorizations=())
    message = _prepare_message(
        block_env, tx_env, caller, to, U256(0), data, True
    )

    begin_transaction(state)
    try:
        output = process_message_call(message)
    finally:
        rollback_transaction(state)

    return Receipt(
        succeeded=output.error is None,
        output=output.return_data,
        logs=output.logs,
        error=output.error,
    )
