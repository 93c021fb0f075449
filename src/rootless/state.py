"""
State.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

The state contains all information that is preserved between messages:
account nonces, balances, code and storage.

Every message runs inside a snapshot taken by `begin_transaction`. A
message that fails calls `rollback_transaction`, which discards every write
made since its snapshot, including writes by nested messages that had
already committed.
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from ethereum_types.bytes import Bytes, Bytes32
from ethereum_types.numeric import U256, Uint

from .fork_types import EMPTY_ACCOUNT, Account, Address

if TYPE_CHECKING:
    from .contracts import Program

Storage = Dict[Bytes32, U256]


@dataclass
class State:
    """
    Contains all information that is preserved between messages.
    """

    _accounts: Dict[Address, Account] = field(default_factory=dict)
    _storage: Dict[Address, Storage] = field(default_factory=dict)
    _snapshots: List[Tuple[Dict[Address, Account], Dict[Address, Storage]]] = (
        field(default_factory=list)
    )


def begin_transaction(state: State) -> None:
    """
    Start a state transaction.

    Transactions are entirely implicit and can be nested. It is not possible
    to calculate the state root during a transaction.

    Parameters
    ----------
    state : State
        The state.

    """
    state._snapshots.append(
        (
            dict(state._accounts),
            {
                address: dict(storage)
                for address, storage in state._storage.items()
            },
        )
    )


def commit_transaction(state: State) -> None:
    """
    Commit a state transaction.

    Parameters
    ----------
    state : State
        The state.

    """
    state._snapshots.pop()


def rollback_transaction(state: State) -> None:
    """
    Rollback a state transaction, resetting the state to the point when the
    corresponding `begin_transaction()` call was made.

    Parameters
    ----------
    state : State
        The state.

    """
    state._accounts, state._storage = state._snapshots.pop()


def get_account_optional(state: State, address: Address) -> Optional[Account]:
    """
    Get the `Account` object at an address. Returns `None` (rather than
    `EMPTY_ACCOUNT`) if there is no account at the address.
    """
    return state._accounts.get(address)


def get_account(state: State, address: Address) -> Account:
    """
    Get the `Account` object at an address. Returns `EMPTY_ACCOUNT` if there
    is no account at the address.

    Use `get_account_optional()` if you care about the difference between a
    non-existent account and `EMPTY_ACCOUNT`.
    """
    account = get_account_optional(state, address)
    if account is None:
        return EMPTY_ACCOUNT
    return account


def set_account(state: State, address: Address, account: Account) -> None:
    """
    Set the `Account` object at an address.
    """
    state._accounts[address] = account


def account_exists(state: State, address: Address) -> bool:
    """
    Checks if an account exists in the state trie.
    """
    return get_account_optional(state, address) is not None


def get_storage(state: State, address: Address, key: Bytes32) -> U256:
    """
    Get a value at a storage key on an account. Returns `U256(0)` if the
    storage key has not been set previously.
    """
    return state._storage.get(address, {}).get(key, U256(0))


def set_storage(
    state: State, address: Address, key: Bytes32, value: U256
) -> None:
    """
    Set a value at a storage key on an account. Setting to `U256(0)` deletes
    the key.
    """
    storage = state._storage.setdefault(address, {})
    if value == 0:
        storage.pop(key, None)
        if not storage:
            del state._storage[address]
    else:
        storage[key] = value

    if not account_exists(state, address):
        set_account(state, address, EMPTY_ACCOUNT)


def increment_nonce(state: State, address: Address) -> None:
    """
    Increments the nonce of an account.
    """
    account = get_account(state, address)
    set_account(
        state, address, replace(account, nonce=account.nonce + Uint(1))
    )


def set_account_balance(state: State, address: Address, amount: U256) -> None:
    """
    Sets the balance of an account.
    """
    account = get_account(state, address)
    set_account(state, address, replace(account, balance=amount))


def move_ether(
    state: State,
    sender_address: Address,
    recipient_address: Address,
    amount: U256,
) -> None:
    """
    Move funds between accounts. The caller checks the sender's balance.
    """
    sender = get_account(state, sender_address)
    assert sender.balance >= amount
    set_account_balance(state, sender_address, U256(sender.balance - amount))
    recipient = get_account(state, recipient_address)
    set_account_balance(
        state, recipient_address, U256(recipient.balance + amount)
    )


def set_code(state: State, address: Address, code: Bytes) -> None:
    """
    Sets the code of an account. Used to install delegation designations.
    """
    account = get_account(state, address)
    set_account(state, address, replace(account, code=code))


def deploy_program(state: State, address: Address, program: "Program") -> None:
    """
    Attach a Python program to `address`, making it a contract account.
    """
    set_account(
        state,
        address,
        replace(get_account(state, address), nonce=Uint(1), program=program),
    )
