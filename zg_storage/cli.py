import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from zg_storage.config import settings
from zg_storage.errors import StorageError
from zg_storage.services import TransferManager, ZeroGStorageClient


@dataclass
class CliState:
    private_key: str
    rpc_url: str
    indexer_rpc: str


def build_manager(state: CliState) -> TransferManager:
    client = ZeroGStorageClient.from_settings(
        settings,
        state.private_key,
        rpc_url=state.rpc_url,
        indexer_rpc=state.indexer_rpc,
    )
    return TransferManager(client)


@click.group()
@click.option(
    "-k",
    "--key",
    "private_key",
    envvar="ZG_PRIVATE_KEY",
    required=True,
    help="Private key used to sign storage transactions.",
)
@click.option("--rpc-url", default=lambda: str(settings.rpc_url), help="0G chain RPC URL. Defaults to ZG_RPC_URL.")
@click.option(
    "--indexer",
    "indexer_rpc",
    default=lambda: str(settings.indexer_rpc),
    help="Indexer RPC URL. Defaults to ZG_INDEXER_RPC.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log storage client output.")
@click.pass_context
def cli(ctx: click.Context, private_key: str, rpc_url: str, indexer_rpc: str, verbose: bool) -> None:
    """Upload files to and download files from 0G Storage."""
    logging.basicConfig(level=logging.DEBUG if verbose else settings.log_level.upper())
    ctx.obj = CliState(private_key=private_key, rpc_url=rpc_url, indexer_rpc=indexer_rpc)


@cli.command("upload")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def upload(state: CliState, filepath: Path) -> None:
    """Upload FILEPATH and print its root hash and transaction hash."""
    click.echo(f"Uploading {filepath}...")
    try:
        receipt = build_manager(state).upload(filepath)
    except StorageError as e:
        raise click.ClickException(str(e))
    except Exception as e:
        raise click.ClickException(f"Upload failed: {e}")

    click.echo("File uploaded successfully!")
    click.echo(f"Root hash: {receipt.root_hash}")
    click.echo(f"Transaction hash: {receipt.transaction_hash}")


@cli.command("download")
@click.argument("roothash")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the file. Defaults to the downloads directory, named after ROOTHASH.",
)
@click.pass_obj
def download(state: CliState, roothash: str, output: Optional[Path]) -> None:
    """Download the file identified by ROOTHASH."""
    output_path = output or settings.download_dir / roothash
    click.echo(f"Downloading {roothash} to {output_path}...")
    try:
        saved = build_manager(state).download(roothash, output_path)
    except StorageError as e:
        raise click.ClickException(str(e))
    except Exception as e:
        raise click.ClickException(f"Download failed: {e}")

    click.echo(f"File saved to {saved}")


@cli.command("config")
@click.pass_obj
def show_config(state: CliState) -> None:
    """Print the network endpoints in effect."""
    click.echo(f"RPC URL: {state.rpc_url}")
    click.echo(f"Flow contract: {settings.flow_contract}")
    click.echo(f"Indexer RPC: {state.indexer_rpc}")
    click.echo(f"Storage client: {settings.client_binary}")


if __name__ == "__main__":
    cli()
