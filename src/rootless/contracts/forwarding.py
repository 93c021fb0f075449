"""
Call forwarding.

Both proxies, and the wallet for calls it does not know, end up here: the
payload is relayed unchanged and the callee's result, success or failure,
comes back unchanged.
"""

from typing import Tuple

from ethereum_types.bytes import Bytes

from ..crypto.hash import keccak256
from ..fork_types import NULL_ADDRESS, Address
from ..utils.address import to_address_masked
from ..vm import Evm
from ..vm.exceptions import Revert
from ..vm.instructions.storage import sload
from ..vm.instructions.system import call, delegatecall

FALLBACK_HANDLER_SLOT = keccak256(b"fallback_manager.handler.address")


def delegate(
    evm: Evm, target: Address, call_payload: Bytes
) -> Tuple[bool, Bytes]:
    """
    Execute `call_payload` with the program of `target` against the storage
    of the current account.

    Parameters
    ----------
    evm :
        The current frame.
    target :
        Account whose program is borrowed.
    call_payload :
        Calldata passed to the program.

    Returns
    -------
    result : `Tuple[bool, Bytes]`
        Whether the call succeeded, and its raw output.

    """
    return delegatecall(evm, target, call_payload)


def forward(evm: Evm, target: Address) -> Bytes:
    """
    Relay the current message to `target` with `delegate`. The output is
    returned on success and re-raised as a `Revert` carrying the very same
    bytes on failure.
    """
    success, output = delegate(evm, target, evm.message.data)
    if not success:
        raise Revert(output)
    return output


def read_fallback_handler(evm: Evm) -> Address:
    """
    The fallback handler configured on the current account, if any.
    """
    return to_address_masked(sload(evm, FALLBACK_HANDLER_SLOT))


def forward_to_fallback_handler(evm: Evm) -> Bytes:
    """
    Relay the current message to the account's fallback handler with the
    original caller's address appended to the payload.

    Without a handler the call succeeds and returns nothing.
    """
    handler = read_fallback_handler(evm)
    if handler == NULL_ADDRESS:
        return b""

    success, output = call(
        evm, handler, evm.message.data + evm.message.caller
    )
    if not success:
        raise Revert(output)
    return output
