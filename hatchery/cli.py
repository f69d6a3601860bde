import click


@click.group()
def main() -> None:
    """Hatchery - worker model catalog for CI hatcheries."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from HATCHERY_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from HATCHERY_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the worker model catalog server."""
    import uvicorn

    from hatchery.catalog.settings import HatcherySettings

    settings = HatcherySettings()

    uvicorn.run(
        "hatchery.catalog.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


# ---------------------------------------------------------------------------
# Catalog schema
# ---------------------------------------------------------------------------


def _alembic_config():
    """Alembic Config for the catalog schema.

    The catalog ships its revisions inside ``hatchery/catalog/alembic`` and
    ``env.py`` reads ``HATCHERY_DATABASE_URL``, so an installed package can
    migrate its own database without a checkout.
    """
    from pathlib import Path

    from alembic.config import Config

    return Config(str(Path(__file__).parent / "catalog" / "alembic.ini"))


@main.group()
def db() -> None:
    """Manage the catalog schema (worker models, groups, projects, pipelines)."""


@db.command()
@click.option("--revision", default="head", help="Catalog schema revision to reach (default: head).")
def upgrade(revision: str) -> None:
    """Bring the catalog schema up to REVISION before starting the server."""
    from alembic import command

    command.upgrade(_alembic_config(), revision)
    click.echo(f"Catalog schema at {revision}.")


@db.command()
@click.option("--revision", default="-1", help="Catalog schema revision to return to (default: one step back).")
def downgrade(revision: str) -> None:
    """Revert the catalog schema, dropping worker model data the target revision lacks."""
    from alembic import command

    command.downgrade(_alembic_config(), revision)
    click.echo(f"Catalog schema reverted to {revision}.")


@db.command()
def current() -> None:
    """Print the catalog schema revision recorded in the database."""
    from alembic import command

    command.current(_alembic_config(), verbose=False)


if __name__ == "__main__":
    main()
