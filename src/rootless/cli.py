"""
Command line interface for mining and checking rootless accounts.

Example:
    rootless mine --delegate 0x... --implementation 0x... --owner 0x...
"""

import sys
from pathlib import Path
from typing import Callable, Optional, Tuple

import click
from ethereum_types.bytes import Bytes
from ethereum_types.numeric import U256, Uint

from .authorization import authorization_digest
from .exceptions import MiningExhaustion
from .fork_types import NULL_ADDRESS, Address, SetupParameters
from .logging import configure_logging, get_logger
from .mining import mine_account, verify_account
from .models import MiningConfig, MiningReport
from .utils.hexadecimal import hex_to_address, hex_to_bytes, to_hex
from .vm.exceptions import Unauthorized

logger = get_logger(__name__)


class AddressParamType(click.ParamType):
    """A 0x prefixed, 20 byte hex address."""

    name = "address"

    def convert(
        self,
        value: object,
        param: Optional[click.Parameter],
        ctx: Optional[click.Context],
    ) -> Address:
        """Convert a hex string to an `Address`."""
        if isinstance(value, bytes) and len(value) == 20:
            return Address(value)
        text = str(value)
        if not text.startswith("0x") or len(text) != 42:
            self.fail(
                f"{value!r} is not a 0x prefixed 20 byte address", param, ctx
            )
        try:
            return hex_to_address(text)
        except ValueError:
            self.fail(f"{value!r} is not valid hex", param, ctx)


class HexBytesParamType(click.ParamType):
    """Arbitrary hex encoded bytes, with or without a 0x prefix."""

    name = "hex"

    def convert(
        self,
        value: object,
        param: Optional[click.Parameter],
        ctx: Optional[click.Context],
    ) -> Bytes:
        """Convert a hex string to bytes."""
        if isinstance(value, bytes):
            return value
        try:
            return hex_to_bytes(str(value))
        except ValueError:
            self.fail(f"{value!r} is not valid hex", param, ctx)


ADDRESS = AddressParamType()
HEX_BYTES = HexBytesParamType()


def setup_options(func: Callable[..., None]) -> Callable[..., None]:
    """
    Options describing the implementation and setup parameters.
    """
    options = [
        click.option(
            "--delegate",
            required=True,
            type=ADDRESS,
            help="Address of the proxy every account delegates to.",
        ),
        click.option(
            "--implementation",
            required=True,
            type=ADDRESS,
            help="Wallet implementation the account is claimed for.",
        ),
        click.option(
            "--owner",
            "owners",
            required=True,
            multiple=True,
            type=ADDRESS,
            help="Wallet owner, repeat for several owners.",
        ),
        click.option(
            "--threshold",
            default=1,
            show_default=True,
            type=click.IntRange(min=0),
            help="Number of owner confirmations required.",
        ),
        click.option(
            "--initializer",
            default=None,
            type=ADDRESS,
            help="Contract delegate-called at the end of setup.",
        ),
        click.option(
            "--initializer-data",
            default="0x",
            type=HEX_BYTES,
            help="Calldata for the initializer.",
        ),
        click.option(
            "--fallback-handler",
            default=None,
            type=ADDRESS,
            help="Fallback handler of the wallet.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_setup(
    owners: Tuple[Address, ...],
    threshold: int,
    initializer: Optional[Address],
    initializer_data: Bytes,
    fallback_handler: Optional[Address],
) -> SetupParameters:
    """
    Assemble setup parameters from command line options.
    """
    return SetupParameters(
        owners=tuple(owners),
        threshold=Uint(threshold),
        to=initializer or NULL_ADDRESS,
        data=initializer_data,
        fallback_handler=fallback_handler or NULL_ADDRESS,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(
        ["DEBUG", "VERBOSE", "INFO", "WARNING", "FAIL", "ERROR"],
        case_sensitive=False,
    ),
    help="Logging level.",
)
@click.option(
    "--log-file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write logs to this file.",
)
def cli(log_level: str, log_file: Optional[Path]) -> None:
    """Mine and verify rootless accounts."""
    configure_logging(log_level, log_file)


@cli.command("mine")
@setup_options
@click.option(
    "--starting-salt",
    default=0,
    show_default=True,
    type=click.IntRange(min=0, max=int(U256.MAX_VALUE)),
    help="First salt to try.",
)
@click.option(
    "--max-iterations",
    default=None,
    type=click.IntRange(min=1),
    help="Give up after this many salts. Unbounded by default.",
)
def mine_command(
    delegate: Address,
    implementation: Address,
    owners: Tuple[Address, ...],
    threshold: int,
    initializer: Optional[Address],
    initializer_data: Bytes,
    fallback_handler: Optional[Address],
    starting_salt: int,
    max_iterations: Optional[int],
) -> None:
    """Mine a rootless account and print it as JSON."""
    setup = build_setup(
        owners, threshold, initializer, initializer_data, fallback_handler
    )
    config = MiningConfig(max_iterations=max_iterations)
    try:
        commitment, mined = mine_account(
            implementation, setup, U256(starting_salt), delegate, config
        )
    except MiningExhaustion as error:
        raise click.ClickException(str(error)) from error

    report = MiningReport.from_result(delegate, commitment, mined)
    click.echo(report.model_dump_json(by_alias=True, indent=2))


@cli.command("verify")
@setup_options
@click.option(
    "--account",
    required=True,
    type=ADDRESS,
    help="Account the parameters are claimed to reproduce.",
)
@click.option(
    "--salt",
    required=True,
    type=click.IntRange(min=0, max=int(U256.MAX_VALUE)),
    help="Salt the account was mined with.",
)
def verify_command(
    delegate: Address,
    implementation: Address,
    owners: Tuple[Address, ...],
    threshold: int,
    initializer: Optional[Address],
    initializer_data: Bytes,
    fallback_handler: Optional[Address],
    account: Address,
    salt: int,
) -> None:
    """Check that a claim would be accepted by the account."""
    setup = build_setup(
        owners, threshold, initializer, initializer_data, fallback_handler
    )
    try:
        verify_account(account, implementation, setup, U256(salt), delegate)
    except Unauthorized:
        logger.fail("parameters do not reproduce %s", to_hex(account))
        click.echo(f"unauthorized: {to_hex(account)}", err=True)
        sys.exit(1)
    click.echo(f"ok: {to_hex(account)}")


@cli.command("digest")
@click.option(
    "--delegate",
    required=True,
    type=ADDRESS,
    help="Address of the proxy accounts delegate to.",
)
def digest_command(delegate: Address) -> None:
    """Print the authorization digest accounts are recovered from."""
    click.echo(to_hex(authorization_digest(delegate)))
