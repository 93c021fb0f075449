"""
Contract ABI helpers.

Thin wrappers over `eth_abi` describing functions, events and custom
errors by their canonical signature, e.g. `getOwners()` or
`ProxyCreation(address,address)`. Decoded addresses are returned as
`Address` values rather than checksummed strings.
"""

from typing import Any, Sequence, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from ethereum_types.bytes import Bytes, Bytes4
from ethereum_types.numeric import Unsigned

from .crypto.hash import keccak256
from .fork_types import Address, Log
from .utils.hexadecimal import hex_to_address
from .vm.exceptions import Revert


def parse_signature(signature: str) -> Tuple[str, Tuple[str, ...]]:
    """
    Split `name(type0,type1,...)` into its name and parameter types.
    """
    open_index = signature.index("(")
    if not signature.endswith(")"):
        raise ValueError(f"malformed signature: {signature}")
    name = signature[:open_index]
    body = signature[open_index + 1 : -1]

    types = []
    depth = 0
    current = ""
    for char in body:
        if char == "," and depth == 0:
            types.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current:
        types.append(current)

    return name, tuple(types)


def selector(signature: str) -> Bytes4:
    """
    First four bytes of the keccak256 hash of a signature.
    """
    return Bytes4(keccak256(signature.encode())[:4])


def _from_abi(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return hex_to_address(value)
    if abi_type.endswith("[]"):
        return tuple(_from_abi(abi_type[:-2], item) for item in value)
    return value


def _to_abi(value: Any) -> Any:
    if isinstance(value, Unsigned):
        return int(value)
    if isinstance(value, (list, tuple)):
        return [_to_abi(item) for item in value]
    return value


def decode_values(types: Sequence[str], data: bytes) -> Tuple[Any, ...]:
    """
    Decode `data` as the ABI encoding of `types`.
    """
    values = decode(list(types), data)
    return tuple(
        _from_abi(abi_type, value) for abi_type, value in zip(types, values)
    )


def encode_values(types: Sequence[str], values: Sequence[Any]) -> Bytes:
    """
    ABI encode `values` as `types`.
    """
    return encode(list(types), [_to_abi(value) for value in values])


class Function:
    """
    A contract function identified by its canonical signature.
    """

    signature: str
    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    selector: Bytes4

    def __init__(self, signature: str, outputs: Sequence[str] = ()):
        self.signature = signature
        self.name, self.inputs = parse_signature(signature)
        self.outputs = tuple(outputs)
        self.selector = selector(signature)

    def matches(self, data: bytes) -> bool:
        """
        Whether `data` is a call to this function.
        """
        return data[:4] == self.selector

    def encode_call(self, *args: Any) -> Bytes:
        """
        Build calldata for this function.
        """
        return self.selector + encode_values(self.inputs, args)

    def decode_arguments(self, data: bytes) -> Tuple[Any, ...]:
        """
        Decode the arguments of a call to this function. Calldata that does
        not decode reverts, without output.
        """
        try:
            return decode_values(self.inputs, data[4:])
        except DecodingError as error:
            raise Revert(b"") from error

    def encode_result(self, *values: Any) -> Bytes:
        """
        Encode the return data of this function.
        """
        return encode_values(self.outputs, values)

    def decode_result(self, output: bytes) -> Tuple[Any, ...]:
        """
        Decode the return data of this function.
        """
        return decode_values(self.outputs, output)

    def __repr__(self) -> str:
        return f"Function({self.signature!r})"


class Event:
    """
    A log emitted by a contract.

    `indexed` flags which parameters are emitted as topics; only static
    types can be indexed.
    """

    signature: str
    name: str
    inputs: Tuple[str, ...]
    indexed: Tuple[bool, ...]
    topic: Bytes

    def __init__(self, signature: str, indexed: Sequence[bool] = ()):
        self.signature = signature
        self.name, self.inputs = parse_signature(signature)
        self.indexed = tuple(indexed) + (False,) * (
            len(self.inputs) - len(indexed)
        )
        self.topic = keccak256(signature.encode())

    def build(self, address: Address, *args: Any) -> Log:
        """
        Build the log `address` emits for this event with `args`.
        """
        topics = [self.topic]
        data_types = []
        data_values = []
        for abi_type, is_indexed, value in zip(
            self.inputs, self.indexed, args
        ):
            if is_indexed:
                topics.append(encode_values([abi_type], [value]))
            else:
                data_types.append(abi_type)
                data_values.append(value)

        return Log(
            address=address,
            topics=tuple(topics),
            data=encode_values(data_types, data_values),
        )

    def matches(self, log: Log) -> bool:
        """
        Whether `log` was emitted for this event.
        """
        return len(log.topics) > 0 and log.topics[0] == self.topic

    def decode(self, log: Log) -> Tuple[Any, ...]:
        """
        Decode the parameters of `log`, in signature order.
        """
        if not self.matches(log):
            raise ValueError(f"log is not a {self.name} event")

        data_types = [
            abi_type
            for abi_type, is_indexed in zip(self.inputs, self.indexed)
            if not is_indexed
        ]
        data_values = iter(decode_values(data_types, log.data))
        topics = iter(log.topics[1:])

        values = []
        for abi_type, is_indexed in zip(self.inputs, self.indexed):
            if is_indexed:
                values.append(decode_values([abi_type], next(topics))[0])
            else:
                values.append(next(data_values))
        return tuple(values)

    def __repr__(self) -> str:
        return f"Event({self.signature!r})"
