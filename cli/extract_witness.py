"""
CLI entry point for `extract-witness`: writes the witness of a block as JSON.

Example usage:

```console
extract-witness --block 0x10 --rpc-url http://127.0.0.1:8545 --output witness.json
```

Node settings are read from `env.yaml` (see `config.env`), options given on the command
line take precedence.
"""

import logging
import sys
from pathlib import Path

import click

from block_witness import (
    WitnessAssembler,
    WitnessError,
    parse_block_number,
    setup_logger,
)
from config import EnvConfig
from witness_rpc import EthRPC, WitnessRPCError

logger = logging.getLogger(__name__)


def block_number_callback(ctx: click.Context, param: click.Parameter, value: str):
    """Convert the `--block` option to a block number or tag."""
    try:
        return parse_block_number(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def error_line(error: Exception) -> str:
    """Return a single line describing `error`."""
    lines = str(error).splitlines()
    message = lines[0] if lines else ""
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


@click.command()
@click.option(
    "--block",
    "-b",
    "block_number",
    default="latest",
    show_default=True,
    callback=block_number_callback,
    help="Block to extract: a decimal or 0x-hex number, or a tag such as `latest`.",
)
@click.option("--rpc-url", help="JSON-RPC endpoint of the node. Overrides `env.yaml`.")
@click.option(
    "--timeout", type=click.FloatRange(min=0, min_open=True), help="Request timeout in seconds."
)
@click.option(
    "--max-workers", type=click.IntRange(min=1), help="Maximum number of concurrent requests."
)
@click.option(
    "--retries", type=click.IntRange(min=1), help="Attempts per request on transport failures."
)
@click.option(
    "--no-batch",
    is_flag=True,
    help="Send the state reads of an account one by one instead of in a JSON-RPC batch.",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Fail when the node returns null for a state read instead of recording it as unknown.",
)
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file. Defaults to $WITNESS_ENV_PATH or ./env.yaml.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the witness to this file instead of stdout.",
)
@click.option(
    "--indent",
    type=click.IntRange(min=0),
    default=None,
    help="Indent the JSON document by this many spaces.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every remote call.")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors.")
def extract_witness(
    block_number,
    rpc_url: str | None,
    timeout: float | None,
    max_workers: int | None,
    retries: int | None,
    no_batch: bool,
    strict: bool,
    env_file: Path | None,
    output: Path | None,
    indent: int | None,
    verbose: bool,
    quiet: bool,
):
    """Extract the witness of a block from an Ethereum JSON-RPC node."""
    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")
    setup_logger(level=logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO)

    try:
        node = EnvConfig(env_file).remote_node
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    max_workers = max_workers or node.max_workers
    rpc = EthRPC(
        rpc_url or str(node.node_url),
        node.rpc_headers,
        timeout=timeout or node.timeout,
        max_retries=retries or node.max_retries,
        pool_size=max_workers,
    )
    assembler = WitnessAssembler(
        rpc, max_workers=max_workers, batched=not no_batch, strict=strict
    )
    try:
        with rpc:
            witness = assembler.assemble(block_number)
    except (WitnessError, WitnessRPCError) as e:
        logger.debug("witness extraction failed", exc_info=True)
        click.secho(f"Error: {error_line(e)}", fg="red", err=True)
        sys.exit(1)

    document = witness.to_json_string(indent=indent or None)
    if output is None:
        click.echo(document)
    else:
        try:
            output.write_text(document + "\n")
        except OSError as e:
            click.secho(f"Error: cannot write {output}: {e.strerror or e}", fg="red", err=True)
            sys.exit(1)
        logger.info("witness of block %s written to %s", witness.block_header.number, output)


if __name__ == "__main__":
    extract_witness()
