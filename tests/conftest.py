"""
Shared fixtures: a fresh ledger with a wallet implementation and both
proxies deployed, and a funded sender.
"""

from typing import Callable, Tuple

import pytest
from ethereum_types.numeric import U256, Uint

from rootless.commitment import Commitment
from rootless.contracts import deploy
from rootless.contracts.auto_setup import AutoSetupProxy
from rootless.contracts.lifecycle import RootlessProxy
from rootless.contracts.wallet import OwnerWallet
from rootless.fork import (
    Transaction,
    new_block_environment,
    process_transaction,
)
from rootless.fork_types import Address, SetupParameters
from rootless.mining import MinedAccount, mine_account
from rootless.state import set_account_balance
from rootless.utils.hexadecimal import hex_to_address
from rootless.vm import BlockEnvironment

WALLET_ADDRESS = hex_to_address("0x5afe00000000000000000000000000000000a11e")
PROXY_ADDRESS = hex_to_address("0x7702000000000000000000000000000000000001")
AUTO_PROXY_ADDRESS = hex_to_address(
    "0x7702000000000000000000000000000000000002"
)
OWNER = hex_to_address("0x000000000000000000000000000000000000000a")
SENDER = hex_to_address("0x00000000000000000000000000000000000f00d5")
BYSTANDER = hex_to_address("0x000000000000000000000000000000000000dead")

MinedFactory = Callable[..., Tuple[Commitment, MinedAccount]]


@pytest.fixture
def block_env() -> BlockEnvironment:
    """A ledger with the wallet and both proxies deployed."""
    block_env = new_block_environment()
    deploy(block_env.state, OwnerWallet(WALLET_ADDRESS))
    deploy(block_env.state, RootlessProxy(PROXY_ADDRESS))
    deploy(
        block_env.state, AutoSetupProxy(AUTO_PROXY_ADDRESS, WALLET_ADDRESS)
    )
    set_account_balance(block_env.state, SENDER, U256(10**18))
    return block_env


@pytest.fixture
def setup() -> SetupParameters:
    """One-of-one wallet owned by `OWNER`."""
    return SetupParameters(owners=(OWNER,), threshold=Uint(1))


@pytest.fixture
def activate(block_env: BlockEnvironment) -> MinedFactory:
    """
    Mine an account delegating to `delegate` and apply its authorization
    with a transaction that does not touch the account otherwise.
    """

    def _activate(
        setup: SetupParameters,
        starting_salt: int = 0,
        implementation: Address = WALLET_ADDRESS,
        delegate: Address = PROXY_ADDRESS,
    ) -> Tuple[Commitment, MinedAccount]:
        commitment, mined = mine_account(
            implementation, setup, U256(starting_salt), delegate
        )
        receipt = process_transaction(
            block_env,
            Transaction(
                sender=SENDER,
                to=BYSTANDER,
                authorizations=(mined.authorization(delegate),),
            ),
        )
        assert receipt.authorities == (mined.account,)
        return commitment, mined

    return _activate
