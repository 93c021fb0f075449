"""
Set EOA account code.

Applying an authorization points an account's code at a delegate by
installing a delegation designation, the marker `0xef0100` followed by the
delegate's address. Messages to the account then run the delegate's
program against the account's own storage.
"""

from typing import Optional, Tuple

from ethereum_types.numeric import U64, Uint

from ..authorization import ANY_CHAIN_ID, recover_authority
from ..exceptions import InvalidSignatureError
from ..fork_types import NULL_ADDRESS, Address
from ..logging import get_logger
from ..state import (
    State,
    get_account,
    increment_nonce,
    set_code,
)
from . import Message

logger = get_logger(__name__)

EOA_DELEGATION_MARKER = b"\xef\x01\x00"
EOA_DELEGATION_MARKER_LENGTH = len(EOA_DELEGATION_MARKER)
EOA_DELEGATED_CODE_LENGTH = 23


def is_valid_delegation(code: bytes) -> bool:
    """
    Whether the code is a valid delegation designation.

    Parameters
    ----------
    code: `bytes`
        The code to check.

    Returns
    -------
    valid : `bool`
        True if the code is a valid delegation designation,
        False otherwise.

    """
    if (
        len(code) == EOA_DELEGATED_CODE_LENGTH
        and code[:EOA_DELEGATION_MARKER_LENGTH] == EOA_DELEGATION_MARKER
    ):
        return True
    return False


def get_delegated_code_address(code: bytes) -> Optional[Address]:
    """
    Get the address to which the code delegates.

    Parameters
    ----------
    code: `bytes`
        The code to get the address from.

    Returns
    -------
    address : `Optional[Address]`
        The address of the delegated code.

    """
    if is_valid_delegation(code):
        return Address(code[EOA_DELEGATION_MARKER_LENGTH:])
    return None


def delegation_designation(delegate: Address) -> bytes:
    """
    The code that delegates an account to `delegate`.
    """
    return EOA_DELEGATION_MARKER + delegate


def resolve_code_address(state: State, address: Address) -> Address:
    """
    Address whose program runs when `address` is called. Delegations are
    followed one level only.
    """
    delegated_address = get_delegated_code_address(
        get_account(state, address).code
    )
    if delegated_address is None:
        return address
    return delegated_address


def set_delegation(message: Message) -> Tuple[Address, ...]:
    """
    Set the delegation code for the authorities in the message.

    Authorizations for another chain, with a stale nonce, with an invalid
    signature, or whose authority already has non-delegation code are
    skipped.

    Parameters
    ----------
    message :
        Transaction specific items.

    Returns
    -------
    authorities : `Tuple[Address, ...]`
        The authorities whose code was set, in order.

    """
    state = message.block_env.state
    authorities = []
    for auth in message.tx_env.authorizations:
        if auth.chain_id not in (message.block_env.chain_id, ANY_CHAIN_ID):
            logger.debug("skipping authorization for chain %d", auth.chain_id)
            continue

        if auth.nonce >= U64.MAX_VALUE:
            continue

        try:
            authority = recover_authority(auth)
        except InvalidSignatureError:
            logger.debug("skipping authorization with invalid signature")
            continue

        authority_account = get_account(state, authority)
        authority_code = authority_account.code

        if authority_account.program is not None or (
            authority_code and not is_valid_delegation(authority_code)
        ):
            continue

        if authority_account.nonce != Uint(auth.nonce):
            logger.debug(
                "skipping authorization for 0x%s: nonce %d != %d",
                authority.hex(),
                auth.nonce,
                authority_account.nonce,
            )
            continue

        if auth.address == NULL_ADDRESS:
            code_to_set = b""
        else:
            code_to_set = delegation_designation(auth.address)

        set_code(state, authority, code_to_set)
        increment_nonce(state, authority)
        authorities.append(authority)

    return tuple(authorities)
