"""
Authorization messages.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A rootless account is an address that "signed" an authorization delegating
its code to a fixed contract. The message format is the set code
authorization: a one byte magic followed by the RLP list
`[chain_id, address, nonce]`. Rootless accounts always use a chain id of
zero (valid on any chain) and a nonce of zero (the account has never been
used).
"""

from ethereum_rlp import rlp
from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U64, U256

from .crypto.elliptic_curve import (
    SECP256K1N,
    public_key_to_address,
    secp256k1_recover,
)
from .crypto.hash import Hash32, keccak256
from .exceptions import InvalidSignatureError
from .fork_types import Address, Authorization

SET_CODE_TX_MAGIC = b"\x05"
ANY_CHAIN_ID = U256(0)
INITIAL_NONCE = U64(0)


def encode_authorization_message(
    chain_id: U256, delegate: Address, nonce: U64
) -> Bytes:
    """
    Build the bytes an authority signs to delegate its code to `delegate`.

    The delegate address is encoded in its minimal form, with leading zero
    bytes stripped, the same way the integer fields are.

    Parameters
    ----------
    chain_id :
        Chain the authorization is valid on, zero for any chain.
    delegate :
        Address whose code the authority delegates to.
    nonce :
        Nonce the authority must have when the authorization is applied.

    Returns
    -------
    message : `Bytes`
        The magic byte followed by the RLP encoded record.

    """
    return SET_CODE_TX_MAGIC + rlp.encode(
        (chain_id, Bytes(delegate.lstrip(b"\x00")), nonce)
    )


def authorization_digest(delegate: Address) -> Hash32:
    """
    Hash of the chain agnostic, nonce zero authorization delegating to
    `delegate`. This is the message every rootless account "signed".
    """
    return keccak256(
        encode_authorization_message(ANY_CHAIN_ID, delegate, INITIAL_NONCE)
    )


def signing_hash(authorization: Authorization) -> Hash32:
    """
    Compute the hash an authorization's signature is over.
    """
    return keccak256(
        encode_authorization_message(
            authorization.chain_id,
            authorization.address,
            authorization.nonce,
        )
    )


def recover_authority(authorization: Authorization) -> Address:
    """
    Recover the authority address from the authorization.

    Parameters
    ----------
    authorization
        The authorization to recover the authority from.

    Raises
    ------
    InvalidSignatureError
        If the signature is invalid.

    Returns
    -------
    authority : `Address`
        The recovered authority address.

    """
    y_parity, r, s = authorization.y_parity, authorization.r, authorization.s
    if y_parity not in (0, 1):
        raise InvalidSignatureError("Invalid y_parity in authorization")
    if U256(0) >= r or r >= SECP256K1N:
        raise InvalidSignatureError("Invalid r value in authorization")
    if U256(0) >= s or s > SECP256K1N // U256(2):
        raise InvalidSignatureError("Invalid s value in authorization")

    public_key = secp256k1_recover(
        r, s, U256(y_parity), signing_hash(authorization)
    )
    return public_key_to_address(public_key)
