"""
Ledger Interpreter.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A straightforward interpreter that executes the program attached to a
message's code address.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

from ..exceptions import RootlessException
from ..fork_types import Address, Log
from ..logging import get_logger
from ..state import (
    begin_transaction,
    commit_transaction,
    get_account,
    move_ether,
    rollback_transaction,
)
from . import Evm, Message
from .eoa_delegation import resolve_code_address, set_delegation
from .exceptions import (
    ExceptionalHalt,
    InsufficientBalance,
    Revert,
    StackDepthLimitError,
    WriteInStaticContext,
)

logger = get_logger(__name__)

STACK_DEPTH_LIMIT = Uint(1024)


@dataclass
class MessageCallOutput:
    """
    Output of a particular message call.

    Contains the following:

          1. `logs`: list of `Log` generated during execution.
          2. `error`: The error from the execution if any.
          3. `return_data`: The output of the execution.
          4. `authorities`: Accounts whose code was set by the transaction.
    """

    logs: Tuple[Log, ...]
    error: Optional[RootlessException]
    return_data: Bytes
    authorities: Tuple[Address, ...]


def process_message_call(message: Message) -> MessageCallOutput:
    """
    If `message.target` has delegated its code, execute the delegate's
    program. Authorizations carried by the transaction are applied first
    and stay applied even if the call fails.

    Parameters
    ----------
    message :
        Transaction specific items.

    Returns
    -------
    output : `MessageCallOutput`
        Output of the message call

    """
    state = message.block_env.state
    authorities: Tuple[Address, ...] = ()
    if message.tx_env.authorizations != ():
        authorities = set_delegation(message)

    message.code_address = resolve_code_address(state, message.target)
    evm = process_message(message)

    if evm.error:
        logs: Tuple[Log, ...] = ()
    else:
        logs = evm.logs

    return MessageCallOutput(
        logs=logs,
        error=evm.error,
        return_data=evm.output,
        authorities=authorities,
    )


def process_message(message: Message) -> Evm:
    """
    Move ether and execute the relevant code.

    Parameters
    ----------
    message :
        Transaction specific items.

    Returns
    -------
    evm: :py:class:`~rootless.vm.Evm`
        Items containing execution specific objects

    """
    state = message.block_env.state
    if message.depth > STACK_DEPTH_LIMIT:
        raise StackDepthLimitError("Stack depth limit reached")

    # take snapshot of state before processing the message
    begin_transaction(state)

    try:
        evm = execute_code(message)
    except Exception:
        rollback_transaction(state)
        raise

    if evm.error:
        # revert state to the last saved checkpoint
        # since the message call resulted in an error
        rollback_transaction(state)
    else:
        commit_transaction(state)
    return evm


def execute_code(message: Message) -> Evm:
    """
    Executes the program attached to the message's code address. An address
    with no program accepts any message and returns nothing.

    Parameters
    ----------
    message :
        Transaction specific items.

    Returns
    -------
    evm: `rootless.vm.Evm`
        Items containing execution specific objects

    """
    state = message.block_env.state
    evm = Evm(
        message=message,
        logs=(),
        output=b"",
        return_data=b"",
        error=None,
    )
    try:
        if message.should_transfer_value and message.value != 0:
            if message.is_static:
                raise WriteInStaticContext
            if get_account(state, message.caller).balance < message.value:
                raise InsufficientBalance
            move_ether(
                state, message.caller, message.current_target, message.value
            )

        if message.code_address is None:
            return evm
        program = get_account(state, message.code_address).program
        if program is not None:
            evm.output = program.execute(evm)

    except ExceptionalHalt as error:
        logger.debug(
            "message to 0x%s halted: %r", message.current_target.hex(), error
        )
        evm.output = b""
        evm.error = error
    except Revert as error:
        logger.debug(
            "message to 0x%s reverted: 0x%s",
            message.current_target.hex(),
            error.output.hex(),
        )
        evm.output = error.output
        evm.error = error
    return evm
