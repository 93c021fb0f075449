"""
Elliptic Curves.

The only curve operation the scheme needs is public key recovery. Callers
that only care whether a signature recovers at all use
`recover_address`, which maps every failure to `None`.
"""

from typing import Optional

import coincurve
from ethereum_types.bytes import Bytes, Bytes20
from ethereum_types.numeric import U256

from ..exceptions import InvalidSignatureError
from .hash import Hash32, keccak256

SECP256K1N = U256(
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
)


def secp256k1_recover(r: U256, s: U256, v: U256, msg_hash: Hash32) -> Bytes:
    """
    Recovers the public key from a given signature.

    Parameters
    ----------
    r :
        The `x` coordinate of the nonce point.
    s :
        The signature proof.
    v :
        The recovery id (`y` parity of the nonce point).
    msg_hash :
        Hash of the message being recovered.

    Raises
    ------
    InvalidSignatureError
        If the signature does not recover to a point on the curve.

    Returns
    -------
    public_key : `Bytes`
        Recovered public key, 64 bytes without the format prefix.

    """
    r_bytes = r.to_be_bytes32()
    s_bytes = s.to_be_bytes32()

    signature = bytearray([0] * 65)
    signature[32 - len(r_bytes) : 32] = r_bytes
    signature[64 - len(s_bytes) : 64] = s_bytes
    signature[64] = v

    # If the recovery algorithm returns the point at infinity, or `r` is not
    # the x-coordinate of any point, coincurve raises a ValueError.
    try:
        public_key = coincurve.PublicKey.from_signature_and_message(
            bytes(signature), msg_hash, hasher=None
        )
    except ValueError as e:
        raise InvalidSignatureError from e

    public_key = public_key.format(compressed=False)[1:]
    return public_key


def public_key_to_address(public_key: Bytes) -> Bytes20:
    """
    Derive the 20 byte account address of an uncompressed public key.
    """
    return Bytes20(keccak256(public_key)[12:32])


def recover_address(
    msg_hash: Hash32, y_parity: int, r: U256, s: U256
) -> Optional[Bytes20]:
    """
    Recover the address that signed `msg_hash`, or `None` when the
    signature components are out of range or do not recover.

    Parameters
    ----------
    msg_hash :
        Hash of the signed message.
    y_parity :
        Parity of the `y` coordinate of the nonce point, `0` or `1`.
    r :
        The `x` coordinate of the nonce point.
    s :
        The signature proof.

    Returns
    -------
    address : `Optional[Bytes20]`
        The recovered address, or `None`.

    """
    if y_parity not in (0, 1):
        return None
    if U256(0) >= r or r >= SECP256K1N:
        return None
    if U256(0) >= s or s >= SECP256K1N:
        return None

    try:
        public_key = secp256k1_recover(r, s, U256(y_parity), msg_hash)
    except InvalidSignatureError:
        return None

    return public_key_to_address(public_key)
