"""
Ledger Logging Instructions.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Implementations of the instructions that append logs.
"""

from typing import Any

from ...abi import Event
from ...fork_types import Log
from .. import Evm
from ..exceptions import WriteInStaticContext


def log(evm: Evm, entry: Log) -> None:
    """
    Appends a log entry to the current frame.

    Parameters
    ----------
    evm :
        The current frame.
    entry :
        The log to append.

    """
    if evm.message.is_static:
        raise WriteInStaticContext

    evm.logs = evm.logs + (entry,)


def emit(evm: Evm, event: Event, *args: Any) -> None:
    """
    Emit `event` with `args` from the account the frame runs on.
    """
    log(evm, event.build(evm.message.current_target, *args))
