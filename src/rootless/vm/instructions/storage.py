"""
Ledger Storage Instructions.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementations of the storage related instructions.
"""

from ethereum_types.bytes import Bytes32
from ethereum_types.numeric import U256

from ...state import get_storage, set_storage
from .. import Evm
from ..exceptions import WriteInStaticContext


def sload(evm: Evm, key: Bytes32) -> U256:
    """
    Loads the value corresponding to a certain key from the storage of the
    current account.

    Parameters
    ----------
    evm :
        The current frame.
    key :
        The storage key.

    """
    state = evm.message.block_env.state
    return get_storage(state, evm.message.current_target, key)


def sstore(evm: Evm, key: Bytes32, new_value: U256) -> None:
    """
    Stores a value at a certain key in the current context's storage.

    Parameters
    ----------
    evm :
        The current frame.
    key :
        The storage key.
    new_value :
        The value to store.

    """
    if evm.message.is_static:
        raise WriteInStaticContext

    state = evm.message.block_env.state
    set_storage(state, evm.message.current_target, key, new_value)
