"""
Claimable rootless account proxy.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Every rootless account delegates its code to a single `RootlessProxy`.
The account starts out unclaimed, with a zero implementation pointer in
storage slot zero, the slot the wallet implementation keeps its own
singleton address in. A `claim` whose implementation, setup parameters and
salt recover to the account's own address stores the implementation and
runs the setup call against the account; from then on every call is
forwarded to the implementation.

The pointer is written before the setup call runs, so a call back into the
account made by the setup is forwarded to the implementation instead of
reaching `claim` a second time. If setup fails the whole claim fails and
the pointer write is rolled back with it.
"""

from typing import Optional, Tuple

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint

from ..abi import Event, Function
from ..exceptions import MiningExhaustion
from ..fork_types import NULL_ADDRESS, Address, SetupParameters
from ..logging import get_logger
from ..mining import mine_account, verify_account
from ..models import MiningConfig
from ..utils.address import address_to_word, to_address_masked
from ..vm import Evm
from ..vm.exceptions import Revert, SaltSearchExhausted, Unauthorized
from ..vm.instructions.log import emit
from ..vm.instructions.storage import sload, sstore
from . import Program
from .forwarding import delegate, forward, forward_to_fallback_handler

logger = get_logger(__name__)

IMPLEMENTATION_SLOT = U256(0).to_be_bytes32()

CLAIM = Function(
    "claim(address,address[],uint256,address,bytes,address,uint256)"
)
GET_ACCOUNT = Function(
    "getAccount(address,address[],uint256,address,bytes,address,uint256)",
    outputs=("address", "uint256", "uint8", "bytes32", "bytes32"),
)

PROXY_CREATION = Event("ProxyCreation(address,address)", indexed=(True,))


def read_implementation(evm: Evm) -> Address:
    """
    The implementation pointer of the current account, zero if unset.
    """
    return to_address_masked(sload(evm, IMPLEMENTATION_SLOT))


def write_implementation(evm: Evm, implementation: Address) -> None:
    """
    Store the implementation pointer of the current account.
    """
    sstore(evm, IMPLEMENTATION_SLOT, address_to_word(implementation))


def decode_account_arguments(
    function: Function, data: Bytes
) -> Tuple[Address, SetupParameters, U256]:
    """
    Decode the `(implementation, setup..., salt)` arguments shared by
    `claim` and `getAccount`.
    """
    (
        implementation,
        owners,
        threshold,
        to,
        setup_data,
        fallback_handler,
        salt,
    ) = function.decode_arguments(data)
    setup = SetupParameters(
        owners=owners,
        threshold=Uint(threshold),
        to=to,
        data=setup_data,
        fallback_handler=fallback_handler,
    )
    return implementation, setup, U256(salt)


def encode_account_arguments(
    function: Function,
    implementation: Address,
    setup: SetupParameters,
    salt: U256,
) -> Bytes:
    """
    Build calldata for `claim` or `getAccount`.
    """
    return function.encode_call(
        implementation,
        list(setup.owners),
        setup.threshold,
        setup.to,
        setup.data,
        setup.fallback_handler,
        salt,
    )


class RootlessProxy(Program):
    """
    Lifecycle of a rootless account: `Unclaimed` until a valid `claim`,
    then `Initialized` and a pure forwarder.

    Deployed once; `getAccount` called directly on the deployment mines
    accounts for it.
    """

    mining_config: Optional[MiningConfig]

    def __init__(
        self,
        address: Address,
        mining_config: Optional[MiningConfig] = None,
    ):
        super().__init__(address)
        self.mining_config = mining_config

    def execute(self, evm: Evm) -> Bytes:
        """
        Dispatch a message sent to the deployment or to an account.
        """
        implementation = read_implementation(evm)
        if implementation != NULL_ADDRESS:
            return forward(evm, implementation)

        data = evm.message.data
        if CLAIM.matches(data):
            return self.claim(evm)
        if GET_ACCOUNT.matches(data):
            return self.get_account(evm)

        # Unclaimed accounts have nothing to forward to.
        if data:
            raise Revert(b"")
        return b""

    def claim(self, evm: Evm) -> Bytes:
        """
        Initialise the current account, if the arguments reproduce it.
        """
        account = evm.message.current_target
        implementation, setup, salt = decode_account_arguments(
            CLAIM, evm.message.data
        )
        if implementation == NULL_ADDRESS:
            raise Unauthorized

        try:
            commitment = verify_account(
                account, implementation, setup, salt, self.address
            )
        except Unauthorized:
            logger.fail(
                "rejected claim of 0x%s with salt %d", account.hex(), salt
            )
            raise

        write_implementation(evm, implementation)
        success, output = delegate(evm, implementation, commitment.init_call)
        if not success:
            raise Revert(output)

        emit(evm, PROXY_CREATION, account, implementation)
        logger.info(
            "claimed 0x%s for implementation 0x%s",
            account.hex(),
            implementation.hex(),
        )
        return b""

    def get_account(self, evm: Evm) -> Bytes:
        """
        Mine an account when called on the deployment itself. On any other
        account the call goes to its fallback handler, if it has one.
        """
        if evm.message.current_target != self.address:
            return forward_to_fallback_handler(evm)

        implementation, setup, starting_salt = decode_account_arguments(
            GET_ACCOUNT, evm.message.data
        )
        try:
            _, mined = mine_account(
                implementation,
                setup,
                starting_salt,
                self.address,
                self.mining_config,
            )
        except MiningExhaustion as error:
            raise SaltSearchExhausted from error

        return GET_ACCOUNT.encode_result(
            mined.account,
            mined.salt,
            mined.v,
            mined.r.to_be_bytes32(),
            mined.s.to_be_bytes32(),
        )
