"""
Exceptions which cause an operation to be rejected before or outside of
execution on the ledger.
"""


class RootlessException(Exception):
    """
    Base class for all exceptions _expected_ to be thrown during normal
    operation.
    """


class InvalidSignatureError(RootlessException):
    """
    Thrown when a signature cannot be used to recover a public key.
    """


class InvalidTransaction(RootlessException):
    """
    Thrown when a transaction can never be executed, for example when the
    sender cannot cover the value it sends.
    """


class MiningExhaustion(RootlessException):
    """
    Thrown when the configured iteration bound is reached before a salt
    that recovers to an address is found.

    The search is expected, not guaranteed, to terminate after a handful of
    tries; hitting this means either the bound is very small or something
    is deeply wrong with the recovery primitive.
    """

    attempts: int
    last_salt: int

    def __init__(self, attempts: int, last_salt: int):
        super().__init__(
            f"no recoverable salt after {attempts} attempts "
            f"(last salt tried: {last_salt})"
        )
        self.attempts = attempts
        self.last_salt = last_salt
