"""
Serialisable models used for configuration and command line output.
"""

from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, PositiveInt
from pydantic.alias_generators import to_camel
from typing_extensions import Self

from .authorization import authorization_digest
from .commitment import Commitment
from .fork_types import Address
from .utils.hexadecimal import to_hex

if TYPE_CHECKING:
    from .mining import MinedAccount


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `init_hash` in a Python model will be
    represented as `initHash` when it is serialized to json.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        extra="forbid",
    )


class MiningConfig(CamelModel):
    """
    Tunables of the address search.

    The search has no natural upper bound: every try succeeds with
    probability close to one half, so it usually ends within a few tries,
    but nothing guarantees it. `max_iterations` caps the number of tries;
    `None` searches until a salt is found.
    """

    max_iterations: Optional[PositiveInt] = None
    progress_interval: PositiveInt = 10_000


class MiningReport(CamelModel):
    """
    Hex encoded result of mining an account, as printed by the CLI.
    """

    account: str
    salt: int
    v: int
    r: str
    s: str
    delegate: str
    implementation: str
    init_hash: str
    init_call: str
    authorization_digest: str

    @classmethod
    def from_result(
        cls,
        delegate: Address,
        commitment: Commitment,
        mined: "MinedAccount",
    ) -> Self:
        """
        Build a report from a `MinedAccount` and its commitment.
        """
        return cls(
            account=to_hex(mined.account),
            salt=int(mined.salt),
            v=int(mined.v),
            r=to_hex(mined.r.to_be_bytes32()),
            s=to_hex(mined.s.to_be_bytes32()),
            delegate=to_hex(delegate),
            implementation=to_hex(commitment.implementation),
            init_hash=to_hex(commitment.init_hash),
            init_call=to_hex(commitment.init_call),
            authorization_digest=to_hex(authorization_digest(delegate)),
        )
