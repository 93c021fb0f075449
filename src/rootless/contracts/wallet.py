"""
Minimal multi-owner wallet.

Rootless accounts are initialised as wallets; this is the smallest wallet
that can be set up through the standard `setup` call and queried
afterwards. It keeps owners and threshold, supports an initializer and a
fallback handler, and does nothing else. Transaction execution and
signature checks are out of scope.

Storage layout, relative to the account it runs on:

- slot 0: implementation pointer (owned by the proxy, never written here)
- slot 2: number of owners, owners at `keccak256(slot 2) + i`
- slot 4: threshold
- `keccak256("fallback_manager.handler.address")`: fallback handler
"""

from typing import Callable, Dict, List, Tuple

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U256, Uint

from ..abi import Event, Function
from ..commitment import SETUP
from ..crypto.hash import keccak256
from ..fork_types import NULL_ADDRESS, Address
from ..utils.address import address_to_word, to_address_masked
from ..vm import Evm
from ..vm.exceptions import (
    AlreadyInitialized,
    InvalidOwner,
    InvalidThreshold,
    Revert,
    UnsupportedPayment,
)
from ..vm.instructions.log import emit
from ..vm.instructions.storage import sload, sstore
from ..vm.instructions.system import delegatecall
from . import Program
from .forwarding import FALLBACK_HANDLER_SLOT, forward_to_fallback_handler

OWNERS_SLOT = U256(2).to_be_bytes32()
THRESHOLD_SLOT = U256(4).to_be_bytes32()
MAX_STORAGE_WORDS = 1024

GET_OWNERS = Function("getOwners()", outputs=("address[]",))
GET_THRESHOLD = Function("getThreshold()", outputs=("uint256",))
IS_OWNER = Function("isOwner(address)", outputs=("bool",))
GET_STORAGE_AT = Function(
    "getStorageAt(uint256,uint256)", outputs=("bytes",)
)

SETUP_PERFORMED = Event(
    "SetupPerformed(address,address[],uint256,address,address)",
    indexed=(True,),
)
VALUE_RECEIVED = Event("ValueReceived(address,uint256)", indexed=(True,))


def owner_slot(index: int) -> Bytes32:
    """
    Storage slot of the owner at `index`.
    """
    base = U256.from_be_bytes(keccak256(OWNERS_SLOT))
    return U256((int(base) + index) % 2**256).to_be_bytes32()


def read_owners(evm: Evm) -> Tuple[Address, ...]:
    """
    Owners of the current account, in setup order.
    """
    count = int(sload(evm, OWNERS_SLOT))
    return tuple(
        to_address_masked(sload(evm, owner_slot(index)))
        for index in range(count)
    )


class OwnerWallet(Program):
    """
    Wallet implementation that accounts delegate to once initialised.
    """

    def execute(self, evm: Evm) -> Bytes:
        """
        Dispatch on the function selector. Plain transfers are accepted and
        unknown functions go to the fallback handler.
        """
        data = evm.message.data
        if not data:
            emit(
                evm,
                VALUE_RECEIVED,
                evm.message.caller,
                evm.message.value,
            )
            return b""

        handlers: Dict[bytes, Callable[[Evm], Bytes]] = {
            SETUP.selector: self.setup,
            GET_OWNERS.selector: self.get_owners,
            GET_THRESHOLD.selector: self.get_threshold,
            IS_OWNER.selector: self.is_owner,
            GET_STORAGE_AT.selector: self.get_storage_at,
        }
        handler = handlers.get(bytes(data[:4]))
        if handler is None:
            return forward_to_fallback_handler(evm)
        return handler(evm)

    def setup(self, evm: Evm) -> Bytes:
        """
        Initialise owners, threshold and fallback handler, then run the
        optional initializer with a delegated call.
        """
        (
            owners,
            threshold,
            to,
            initializer_data,
            fallback_handler,
            payment_token,
            payment,
            payment_receiver,
        ) = SETUP.decode_arguments(evm.message.data)

        if sload(evm, THRESHOLD_SLOT) != U256(0):
            raise AlreadyInitialized
        if (
            payment_token != NULL_ADDRESS
            or payment != 0
            or payment_receiver != NULL_ADDRESS
        ):
            raise UnsupportedPayment
        if threshold == 0 or threshold > len(owners):
            raise InvalidThreshold

        seen: List[Address] = []
        for owner in owners:
            if owner == NULL_ADDRESS or owner in seen:
                raise InvalidOwner
            seen.append(owner)

        for index, owner in enumerate(owners):
            sstore(evm, owner_slot(index), address_to_word(owner))
        sstore(evm, OWNERS_SLOT, U256(len(owners)))
        sstore(evm, THRESHOLD_SLOT, U256(threshold))
        if fallback_handler != NULL_ADDRESS:
            sstore(
                evm, FALLBACK_HANDLER_SLOT, address_to_word(fallback_handler)
            )

        if to != NULL_ADDRESS:
            success, output = delegatecall(evm, to, initializer_data)
            if not success:
                raise Revert(output)

        emit(
            evm,
            SETUP_PERFORMED,
            evm.message.caller,
            list(owners),
            Uint(threshold),
            to,
            fallback_handler,
        )
        return b""

    def get_owners(self, evm: Evm) -> Bytes:
        """
        ABI encoded list of owners.
        """
        return GET_OWNERS.encode_result(list(read_owners(evm)))

    def get_threshold(self, evm: Evm) -> Bytes:
        """
        ABI encoded threshold, zero before setup.
        """
        return GET_THRESHOLD.encode_result(sload(evm, THRESHOLD_SLOT))

    def is_owner(self, evm: Evm) -> Bytes:
        """
        Whether an address is one of the owners.
        """
        (owner,) = IS_OWNER.decode_arguments(evm.message.data)
        return IS_OWNER.encode_result(owner in read_owners(evm))

    def get_storage_at(self, evm: Evm) -> Bytes:
        """
        Raw storage words starting at slot `offset`. At most
        `MAX_STORAGE_WORDS` words are read per call.
        """
        offset, length = GET_STORAGE_AT.decode_arguments(evm.message.data)
        if length > MAX_STORAGE_WORDS:
            raise Revert(b"")
        words = b"".join(
            sload(evm, U256((offset + index) % 2**256).to_be_bytes32())
            .to_be_bytes32()
            for index in range(length)
        )
        return GET_STORAGE_AT.encode_result(words)
