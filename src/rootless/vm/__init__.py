"""
Ledger Execution Model.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The ledger runs one message at a time. A message executes the program
attached to its `code_address` against the storage of its
`current_target`; for a delegated call those are different accounts.
Execution state of a running message lives in an `Evm` frame.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U64, U256, Uint

from ..exceptions import RootlessException
from ..fork_types import Address, Authorization, Log
from ..state import State

__all__ = (
    "BlockEnvironment",
    "Evm",
    "Message",
    "TransactionEnvironment",
)


@dataclass
class BlockEnvironment:
    """
    Items external to the virtual machine itself, provided by the
    environment.
    """

    chain_id: U64
    state: State


@dataclass
class TransactionEnvironment:
    """
    Items that are used by contract creation or message call.
    """

    origin: Address
    authorizations: Tuple[Authorization, ...]


@dataclass
class Message:
    """
    Items that are used by contract creation or message call.
    """

    block_env: BlockEnvironment
    tx_env: TransactionEnvironment
    caller: Address
    target: Address
    current_target: Address
    value: U256
    data: Bytes
    code_address: Optional[Address]
    depth: Uint
    should_transfer_value: bool
    is_static: bool
    parent_evm: Optional["Evm"]


@dataclass
class Evm:
    """The internal state of the virtual machine."""

    message: Message
    logs: Tuple[Log, ...]
    output: Bytes
    return_data: Bytes
    error: Optional[RootlessException]


def incorporate_child_on_success(evm: Evm, child_evm: Evm) -> None:
    """
    Incorporate the state of a successful `child_evm` into the parent `evm`.

    Parameters
    ----------
    evm :
        The parent `EVM`.
    child_evm :
        The child evm to incorporate.

    """
    evm.logs += child_evm.logs

