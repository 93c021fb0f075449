"""
Auto-initialising proxy.

An account that delegates to an `AutoSetupProxy` needs no claim: the first
message it receives sets its implementation pointer to a fixed wallet and
sets the wallet up with the account itself as the only owner, then carries
on with the original message. A read-only message cannot store the
pointer, so probing an account that was never activated always fails.
"""

from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

from ..commitment import encode_setup_call
from ..fork_types import NULL_ADDRESS, Address, SetupParameters
from ..logging import get_logger
from ..vm import Evm
from ..vm.exceptions import Revert
from ..vm.instructions.log import emit
from ..vm.instructions.system import call
from . import Program
from .forwarding import forward
from .lifecycle import (
    PROXY_CREATION,
    read_implementation,
    write_implementation,
)

logger = get_logger(__name__)


class AutoSetupProxy(Program):
    """
    Proxy whose accounts initialise themselves on first use.
    """

    implementation: Address

    def __init__(self, address: Address, implementation: Address):
        super().__init__(address)
        self.implementation = implementation

    def execute(self, evm: Evm) -> Bytes:
        """
        Activate the account if needed, then forward the message. The
        deployment itself is never activated.
        """
        if evm.message.current_target == self.address:
            if evm.message.data:
                raise Revert(b"")
            return b""

        implementation = read_implementation(evm)
        if implementation == NULL_ADDRESS:
            implementation = self.activate(evm)
        return forward(evm, implementation)

    def activate(self, evm: Evm) -> Address:
        """
        Point the current account at the default implementation and set it
        up as a one-of-one wallet owned by itself.

        The setup is a call from the account to itself. It arrives after the
        pointer is stored, so it is forwarded to the implementation like any
        other call and the wallet records the account as its initiator.
        """
        account = evm.message.current_target
        write_implementation(evm, self.implementation)

        setup = SetupParameters(owners=(account,), threshold=Uint(1))
        success, output = call(evm, account, encode_setup_call(setup))
        if not success:
            raise Revert(output)

        emit(evm, PROXY_CREATION, account, self.implementation)
        logger.info("activated 0x%s", account.hex())
        return self.implementation
