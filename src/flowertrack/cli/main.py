"""Main CLI entry point."""

import logging
import os

import click
from flowertrack.database.factories import create_sqlite_database

# Import and register all commands at module level
from flowertrack.cli.commands import (
    shop,
    sale,
    transaction,
    stock,
    summary,
)


def configure_logging(verbose: bool) -> None:
    """Set up root logging from the -v flag or FLOWERTRACK_LOG_LEVEL."""
    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.environ.get("FLOWERTRACK_LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FLOWERTRACK_DB_PATH environment variable)",
    envvar="FLOWERTRACK_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Flowertrack - flower delivery ledger.

    Track shops, deliveries on credit, cash collected and the godown and
    available flower stock.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Load the store only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["store"] = db.load_store()


# Register all commands
shop.register_commands(cli)
sale.register_commands(cli)
transaction.register_commands(cli)
stock.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
