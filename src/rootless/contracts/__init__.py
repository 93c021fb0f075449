"""
Contracts.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Contract behaviour is written as Python programs attached to accounts. A
program is stateless: all of its state lives in the storage of the account
it runs on, which for a delegated call is the caller's account rather than
the account the program is deployed at.
"""

from abc import ABC, abstractmethod

from ethereum_types.bytes import Bytes

from ..fork_types import Address
from ..state import State, deploy_program
from ..vm import Evm


class Program(ABC):
    """
    Logic of a contract account.

    `address` is where the program is deployed. Comparing it to
    `evm.message.current_target` tells a direct call apart from one made on
    an account that delegates to this program.
    """

    address: Address

    def __init__(self, address: Address):
        self.address = address

    @abstractmethod
    def execute(self, evm: Evm) -> Bytes:
        """
        Run the program for the message in `evm`, returning its output.

        Raise `Revert` to fail with output, or `ExceptionalHalt` to fail
        without.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{self.address.hex()})"


def deploy(state: State, program: Program) -> Program:
    """
    Attach `program` to its address in `state`.
    """
    deploy_program(state, program.address, program)
    return program
