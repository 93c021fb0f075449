"""
Initialisation commitments.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A rootless account commits to the implementation it will delegate to and
the exact wallet `setup` call that initialises it. The commitment hash
seeds the address search and is recomputed when the account is claimed.
"""

from dataclasses import dataclass

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256

from .abi import Function, encode_values
from .crypto.hash import Hash32, keccak256
from .fork_types import NULL_ADDRESS, Address, SetupParameters

SETUP = Function(
    "setup(address[],uint256,address,bytes,address,address,uint256,address)"
)


@dataclass(frozen=True)
class Commitment:
    """
    The commitment hash together with the call it commits to.
    """

    implementation: Address
    init_call: Bytes
    init_hash: Hash32


def encode_setup_call(setup: SetupParameters) -> Bytes:
    """
    ABI encode the wallet `setup` call for `setup`. The payment token,
    payment and payment receiver are always zero.
    """
    return SETUP.encode_call(
        list(setup.owners),
        setup.threshold,
        setup.to,
        setup.data,
        setup.fallback_handler,
        NULL_ADDRESS,
        U256(0),
        NULL_ADDRESS,
    )


def compute_init_hash(implementation: Address, init_call: Bytes) -> Hash32:
    """
    Hash `implementation` together with the hash of its initialisation call,
    as `keccak256(abi.encode(implementation, keccak256(init_call)))`.
    """
    return keccak256(
        encode_values(
            ["address", "bytes32"], [implementation, keccak256(init_call)]
        )
    )


def build_commitment(
    implementation: Address, setup: SetupParameters
) -> Commitment:
    """
    Build the commitment to initialising an account as a wallet backed by
    `implementation` and configured with `setup`.

    Parameters
    ----------
    implementation :
        Address of the wallet implementation the account will delegate to.
    setup :
        Wallet setup parameters.

    Returns
    -------
    commitment : `Commitment`
        The raw `setup` call and its commitment hash.

    """
    init_call = encode_setup_call(setup)
    return Commitment(
        implementation=implementation,
        init_call=init_call,
        init_hash=compute_init_hash(implementation, init_call),
    )
