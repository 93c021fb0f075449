"""
Exceptions which cause a message call to fail.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

`ExceptionalHalt` aborts a frame and discards its output. `Revert` aborts
a frame but hands its output back to the caller unchanged; contract level
custom errors are reverts whose output is the error's ABI selector.
"""

from ethereum_types.bytes import Bytes, Bytes4

from ..crypto.hash import keccak256
from ..exceptions import RootlessException


class ExceptionalHalt(RootlessException):
    """
    Indicates that message execution halted exceptionally. All writes of
    the frame are discarded and it returns no data.
    """


class StackDepthLimitError(ExceptionalHalt):
    """
    Raised when the message depth is greater than `1024`.
    """

    pass


class WriteInStaticContext(ExceptionalHalt):
    """
    Raised when an attempt is made to modify the state while operating inside
    of a STATICCALL context.
    """

    pass


class InsufficientBalance(ExceptionalHalt):
    """
    Raised when a message tries to transfer more value than the caller has.
    """

    pass


class Revert(RootlessException):
    """
    Raised by a program to abort execution and return `output` to its
    caller. A failed delegated call is relayed by raising a `Revert` with
    the delegate's output, byte for byte.
    """

    output: Bytes

    def __init__(self, output: Bytes = b""):
        super().__init__(output.hex())
        self.output = output


class ContractError(Revert):
    """
    A revert whose output is an ABI custom error without arguments.
    Subclasses set `signature`.
    """

    signature: str = "Error()"

    def __init__(self) -> None:
        super().__init__(Bytes4(keccak256(self.signature.encode())[:4]))


class Unauthorized(ContractError):
    """
    The claimed implementation, setup parameters and salt do not reproduce
    the account being claimed.
    """

    signature = "Unauthorized()"


class AlreadyInitialized(ContractError):
    """
    The wallet has already been set up.
    """

    signature = "AlreadyInitialized()"


class InvalidThreshold(ContractError):
    """
    The threshold is zero or larger than the number of owners.
    """

    signature = "InvalidThreshold()"


class InvalidOwner(ContractError):
    """
    An owner is the zero address or appears more than once.
    """

    signature = "InvalidOwner()"


class UnsupportedPayment(ContractError):
    """
    Setup asked for a refund payment, which this wallet does not support.
    """

    signature = "UnsupportedPayment()"


class SaltSearchExhausted(ContractError):
    """
    An on-ledger address search hit its configured bound.
    """

    signature = "MiningExhaustion()"
