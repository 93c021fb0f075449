"""
Ledger System Instructions.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementations of the message call instructions. Each returns the
callee's success flag together with its raw output, which is also kept in
`evm.return_data`.
"""

from typing import Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint

from ...fork_types import Address
from .. import Evm, Message, incorporate_child_on_success
from ..eoa_delegation import resolve_code_address
from ..exceptions import WriteInStaticContext


def generic_call(
    evm: Evm,
    value: U256,
    caller: Address,
    to: Address,
    code_address: Address,
    should_transfer_value: bool,
    is_staticcall: bool,
    call_data: Bytes,
) -> Tuple[bool, Bytes]:
    """
    Perform the core logic of the `CALL*` family of instructions.
    """
    from ...vm.interpreter import STACK_DEPTH_LIMIT, process_message

    evm.return_data = b""

    if evm.message.depth + Uint(1) > STACK_DEPTH_LIMIT:
        return False, b""

    child_message = Message(
        block_env=evm.message.block_env,
        tx_env=evm.message.tx_env,
        caller=caller,
        target=to,
        current_target=to,
        value=value,
        data=call_data,
        code_address=code_address,
        depth=evm.message.depth + Uint(1),
        should_transfer_value=should_transfer_value,
        is_static=True if is_staticcall else evm.message.is_static,
        parent_evm=evm,
    )

    child_evm = process_message(child_message)
    evm.return_data = child_evm.output

    if child_evm.error:
        return False, child_evm.output

    incorporate_child_on_success(evm, child_evm)
    return True, child_evm.output


def call(
    evm: Evm, to: Address, call_data: Bytes, value: U256 = U256(0)
) -> Tuple[bool, Bytes]:
    """
    Message-call into an account.

    Parameters
    ----------
    evm :
        The current frame.
    to :
        The account to call.
    call_data :
        Input of the call.
    value :
        Value sent along with the call.

    """
    if evm.message.is_static and value != U256(0):
        raise WriteInStaticContext

    state = evm.message.block_env.state
    return generic_call(
        evm,
        value,
        evm.message.current_target,
        to,
        resolve_code_address(state, to),
        True,
        False,
        call_data,
    )


def delegatecall(
    evm: Evm, code_address: Address, call_data: Bytes
) -> Tuple[bool, Bytes]:
    """
    Run the program of `code_address` against the current account's
    storage, keeping the current caller and value.

    Parameters
    ----------
    evm :
        The current frame.
    code_address :
        The account whose program is run.
    call_data :
        Input of the call.

    """
    state = evm.message.block_env.state
    return generic_call(
        evm,
        evm.message.value,
        evm.message.caller,
        evm.message.current_target,
        resolve_code_address(state, code_address),
        False,
        False,
        call_data,
    )


def staticcall(
    evm: Evm, to: Address, call_data: Bytes
) -> Tuple[bool, Bytes]:
    """
    Message-call into an account without allowing any state modification.

    Parameters
    ----------
    evm :
        The current frame.
    to :
        The account to call.
    call_data :
        Input of the call.

    """
    state = evm.message.block_env.state
    return generic_call(
        evm,
        U256(0),
        evm.message.current_target,
        to,
        resolve_code_address(state, to),
        True,
        True,
        call_data,
    )

