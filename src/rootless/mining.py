"""
Rootless account mining.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Public key recovery maps a message hash and a signature `(v, r, s)` to the
public key that produced it. Here it is run in reverse: the message is
fixed (the authorization delegating to the proxy contract), `v` and `s` are
protocol constants, and `r` is the hash of a commitment and a salt. Any `r`
that recovers yields an address whose "signature" was chosen before its
key existed, so nobody knows that key. The account can only ever be driven
through the mined authorization and only be claimed with the commitment
that produced `r`.

About half of all `r` values are valid x-coordinates, so the search is
expected to end after two tries. It is not guaranteed to end; callers that
need a bound pass a `MiningConfig`.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ethereum_types.numeric import U8, U64, U256

from .authorization import ANY_CHAIN_ID, INITIAL_NONCE, authorization_digest
from .commitment import Commitment, build_commitment
from .crypto.elliptic_curve import SECP256K1N, recover_address
from .crypto.hash import Hash32, keccak256
from .exceptions import MiningExhaustion
from .fork_types import Address, Authorization, SetupParameters
from .logging import get_logger
from .models import MiningConfig
from .vm.exceptions import Unauthorized

logger = get_logger(__name__)

ROOTLESS_V = U8(27)
ROOTLESS_Y_PARITY = U8(0)
ROOTLESS_S = SECP256K1N // U256(2)


@dataclass(frozen=True)
class MinedAccount:
    """
    A rootless account and the signature it was recovered from.
    """

    account: Address
    salt: U256
    v: U8
    r: U256
    s: U256

    def authorization(self, delegate: Address) -> Authorization:
        """
        The authorization that installs `delegate` as the account's code.
        """
        return Authorization(
            chain_id=ANY_CHAIN_ID,
            address=delegate,
            nonce=U64(INITIAL_NONCE),
            y_parity=U8(int(self.v) - 27),
            r=self.r,
            s=self.s,
        )


def derive_r(init_hash: Hash32, salt: U256) -> U256:
    """
    Compute the `r` signature component for a commitment and salt as
    `keccak256(init_hash ++ salt)`.
    """
    return U256.from_be_bytes(keccak256(init_hash + salt.to_be_bytes32()))


def recover_account(
    digest: Hash32, init_hash: Hash32, salt: U256
) -> Optional[Address]:
    """
    Recover the account derived from `init_hash` and `salt`, or `None` if
    that salt does not yield a valid signature.

    Parameters
    ----------
    digest :
        Authorization digest of the delegate the accounts point to.
    init_hash :
        Commitment hash.
    salt :
        Salt to try.

    Returns
    -------
    account : `Optional[Address]`
        The derived account.

    """
    r = derive_r(init_hash, salt)
    return recover_address(digest, ROOTLESS_Y_PARITY, r, ROOTLESS_S)


def mine(
    init_hash: Hash32,
    starting_salt: U256,
    delegate: Address,
    config: Optional[MiningConfig] = None,
) -> MinedAccount:
    """
    Search for the first salt, starting at `starting_salt`, whose derived
    signature recovers to an address.

    Parameters
    ----------
    init_hash :
        Commitment hash the account is bound to.
    starting_salt :
        First salt to try. Salts are tried in increasing order.
    delegate :
        Address of the proxy contract the account delegates its code to.
    config :
        Optional search bound and progress reporting interval.

    Raises
    ------
    MiningExhaustion
        If `config.max_iterations` salts were tried without success, or
        the salt space was exhausted.

    Returns
    -------
    mined : `MinedAccount`
        The account and the signature components that recover it.

    """
    if config is None:
        config = MiningConfig()

    digest = authorization_digest(delegate)
    salt = int(starting_salt)
    attempts = 0

    while True:
        if salt > int(U256.MAX_VALUE) or (
            config.max_iterations is not None
            and attempts >= config.max_iterations
        ):
            raise MiningExhaustion(attempts, salt - 1)

        account = recover_account(digest, init_hash, U256(salt))
        attempts += 1

        if account is not None:
            logger.debug(
                "mined account 0x%s at salt %d after %d attempt(s)",
                account.hex(),
                salt,
                attempts,
            )
            return MinedAccount(
                account=account,
                salt=U256(salt),
                v=ROOTLESS_V,
                r=derive_r(init_hash, U256(salt)),
                s=ROOTLESS_S,
            )

        if attempts % config.progress_interval == 0:
            logger.verbose(
                "still mining after %d attempts (salt %d)", attempts, salt
            )
        salt += 1


def mine_account(
    implementation: Address,
    setup: SetupParameters,
    starting_salt: U256,
    delegate: Address,
    config: Optional[MiningConfig] = None,
) -> Tuple[Commitment, MinedAccount]:
    """
    Commit to `implementation` and `setup` and mine an account for it.
    """
    commitment = build_commitment(implementation, setup)
    return commitment, mine(
        commitment.init_hash, starting_salt, delegate, config
    )


def verify_account(
    account: Address,
    implementation: Address,
    setup: SetupParameters,
    salt: U256,
    delegate: Address,
) -> Commitment:
    """
    Check that `implementation`, `setup` and `salt` reproduce `account`.

    Raises
    ------
    Unauthorized
        If the parameters recover to any other address, or to none.

    Returns
    -------
    commitment : `Commitment`
        The commitment, whose `init_call` initialises the account.

    """
    commitment = build_commitment(implementation, setup)
    recovered = recover_account(
        authorization_digest(delegate), commitment.init_hash, salt
    )
    if recovered != account:
        raise Unauthorized
    return commitment
