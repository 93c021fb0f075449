"""
Hardfork Utility Functions For Addresses.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Conversions between addresses and 256-bit storage words.
"""

from ethereum_types.numeric import U256

from ..fork_types import Address


def to_address_masked(data: U256) -> Address:
    """
    Convert a Uint or U256 value to a valid address (20 bytes).

    Parameters
    ----------
    data :
        The numeric value to be converted to address.

    Returns
    -------
    address : `Address`
        The obtained address.

    """
    return Address(data.to_be_bytes32()[-20:])


def address_to_word(address: Address) -> U256:
    """
    Convert an address to the storage word it is kept in, zero padded on
    the left.
    """
    return U256.from_be_bytes(address)
