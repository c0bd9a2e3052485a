"""CLI entry point for the rendezvous relay."""

from pathlib import Path

import click

from rendezvous import __version__
from rendezvous.config import load_config
from rendezvous.logging import setup_logging


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None) -> None:
    """Rendezvous relay - pair hosts and guests for direct connections."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)
    ctx.obj["logger"] = setup_logging(ctx.obj["config"])


@main.command()
@click.option("--host", default=None, help="Address to bind (overrides config).")
@click.option("--port", type=int, default=None, help="Port to bind (overrides config).")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the relay server."""
    import asyncio

    from rendezvous.server import RelayServer
    from rendezvous.store import PairingStore

    config = ctx.obj["config"]
    bind_address = host or config.bind_address
    bind_port = port if port is not None else config.port

    store = PairingStore(
        capacity=config.store.capacity,
        ttl_seconds=config.store.ttl_seconds,
    )
    server = RelayServer(store, debug_endpoint=config.debug_endpoint)

    click.echo(f"Relay listening on http://{bind_address}:{bind_port}/")
    click.echo("Press Ctrl+C to stop")
    try:
        asyncio.run(server.serve(bind_address, bind_port))
    except KeyboardInterrupt:
        click.echo("\nShutting down...")
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"rendezvous version {__version__}")
