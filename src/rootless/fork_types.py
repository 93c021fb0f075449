"""
Types re-used throughout the rootless account scheme.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Addresses, ledger accounts, authorization tuples and the setup parameters
that a rootless account commits to.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from ethereum_types.bytes import Bytes, Bytes20
from ethereum_types.numeric import U8, U64, U256, Uint

from .crypto.hash import Hash32

if TYPE_CHECKING:
    from .contracts import Program

Address = Bytes20

NULL_ADDRESS = Address(b"\x00" * 20)


@dataclass(frozen=True)
class Account:
    """
    State associated with an address.

    `code` holds raw code bytes, which for accounts known to this model is
    either empty or a delegation designation. Accounts with behaviour
    implemented in Python carry a `program` instead.
    """

    nonce: Uint
    balance: U256
    code: Bytes
    program: Optional["Program"] = None


EMPTY_ACCOUNT = Account(
    nonce=Uint(0),
    balance=U256(0),
    code=b"",
)


@dataclass(frozen=True)
class Authorization:
    """
    The authorization for a set code transaction.
    """

    chain_id: U256
    address: Address
    nonce: U64
    y_parity: U8
    r: U256
    s: U256


@dataclass(frozen=True)
class SetupParameters:
    """
    Parameters used to initialise a wallet.

    `to` and `data` describe an optional initializer which the wallet
    delegate-executes at the end of its setup. The owners are kept in the
    order given; uniqueness is left to the wallet.
    """

    owners: Tuple[Address, ...]
    threshold: Uint
    to: Address = NULL_ADDRESS
    data: Bytes = b""
    fallback_handler: Address = NULL_ADDRESS


@dataclass(frozen=True)
class Log:
    """
    Data record produced during the execution of a message.
    """

    address: Address
    topics: Tuple[Hash32, ...]
    data: Bytes
