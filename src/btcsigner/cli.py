"""
Command-line interface for the batch payment signer.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from btcsigner.config import Settings, get_settings
from btcsigner.errors import PaymentError
from btcsigner.handler import handle_pay_batch
from btcsigner.models import NetworkType
from btcsigner.service import BitcoinService
from btcsigner.tx_builder import decode_transaction_outputs
from btcsigner.wallet.service import generate_mnemonic, initialize_wallet
from btcsigner.wallet.signing import TransactionSigningError

app = typer.Typer(
    name="btc-signer",
    help="Build and sign Bitcoin batch payments",
    add_completion=False,
)

NetworkOption = Annotated[
    NetworkType | None,
    typer.Option("--network", "-n", help="Bitcoin network (default from settings)"),
]
SecretFileOption = Annotated[
    Path | None,
    typer.Option("--secret-file", "-s", help='JSON file with {"BTC_MNEMONIC": ...}'),
]
LogLevelOption = Annotated[str | None, typer.Option("--log-level", "-l")]


def setup_logging(level: str) -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def _load_settings(
    network: NetworkType | None, secret_file: Path | None, log_level: str | None
) -> Settings:
    overrides: dict[str, object] = {}
    if network is not None:
        overrides["network"] = network.value
    if secret_file is not None:
        overrides["secret_file"] = secret_file
    if log_level is not None:
        overrides["log_level"] = log_level
    settings = get_settings().model_copy(update=overrides)
    setup_logging(settings.log_level)
    return settings


def _read_request(source: str) -> object:
    if source == "-":
        return json.loads(sys.stdin.read())
    path = Path(source)
    if not path.exists():
        raise typer.BadParameter(f"Request file not found: {path}")
    return json.loads(path.read_text())


@app.command("pay-batch")
def pay_batch(
    request: Annotated[str, typer.Argument(help="Payment request JSON file, or - for stdin")],
    network: NetworkOption = None,
    secret_file: SecretFileOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Sign a batch payment and print the response as JSON."""
    settings = _load_settings(network, secret_file, log_level)

    try:
        data = _read_request(request)
    except json.JSONDecodeError as e:
        logger.error(f"Payment request is not valid JSON: {e}")
        raise typer.Exit(1)

    try:
        service = BitcoinService(settings.get_mnemonic(), NetworkType(settings.network))
    except PaymentError as e:
        logger.error(f"Failed to initialize wallet: {e.message}")
        raise typer.Exit(1)

    response = handle_pay_batch({"data": data}, service)
    typer.echo(json.dumps(response.to_dict(), indent=2))
    if not response.ok:
        raise typer.Exit(1)


@app.command()
def address(
    network: NetworkOption = None,
    secret_file: SecretFileOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Show the wallet's receive address."""
    settings = _load_settings(network, secret_file, log_level)
    try:
        wallet = initialize_wallet(settings.get_mnemonic(), NetworkType(settings.network))
    except PaymentError as e:
        logger.error(e.message)
        raise typer.Exit(1)

    typer.echo(f"Network:  {wallet.network.value}")
    typer.echo(f"Path:     {wallet.derivation_path}")
    typer.echo(f"Address:  {wallet.address}")


@app.command()
def generate(
    words: Annotated[int, typer.Option("--words", "-w", help="Number of words (12 or 24)")] = 12,
    network: NetworkOption = None,
) -> None:
    """Generate a fresh mnemonic and show its receive address."""
    if words not in (12, 24):
        logger.error("--words must be 12 or 24")
        raise typer.Exit(1)

    net = network or NetworkType(get_settings().network)
    mnemonic = generate_mnemonic(strength=128 if words == 12 else 256)
    wallet = initialize_wallet(mnemonic, net)

    typer.echo("\n" + "=" * 80)
    typer.echo("GENERATED MNEMONIC - WRITE THIS DOWN AND KEEP IT SAFE!")
    typer.echo("=" * 80)
    typer.echo(f"\n{mnemonic}\n")
    typer.echo(f"Path:     {wallet.derivation_path}")
    typer.echo(f"Pubkey:   {wallet.public_key.hex()}")
    typer.echo(f"Address:  {wallet.address}")
    typer.echo("=" * 80 + "\n")


@app.command()
def decode(
    tx_hex: Annotated[str, typer.Argument(help="Serialized transaction hex")],
    network: NetworkOption = None,
) -> None:
    """List the outputs of a serialized transaction."""
    net = network or NetworkType(get_settings().network)
    try:
        outputs = decode_transaction_outputs(tx_hex.strip(), net)
    except (ValueError, TransactionSigningError) as e:
        logger.error(f"Failed to decode transaction: {e}")
        raise typer.Exit(1)

    for index, (addr, value) in enumerate(outputs):
        typer.echo(f"{index}: {addr} {value:,} sats")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
