"""
Point d'entrée CLI de Curator.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from curator import __version__
from curator.adapters.cli.commands import (
    backfill,
    resolve,
    search,
    sync_imdb_ids,
    sync_seasons,
    trash_app,
)
from curator.config import Settings
from curator.container import Container
from curator.logging_config import configure_logging

app = typer.Typer(
    name="curator",
    help="Administration du catalogue films/series",
)
container = Container()

# Etat global pour les options de verbosite
state = {"verbose": 0, "quiet": False}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """Curator - Administration du catalogue."""
    if quiet:
        state["quiet"] = True
        _reconfigure_logging("ERROR")
    elif verbose:
        state["verbose"] = verbose
        _reconfigure_logging("DEBUG" if verbose == 1 else "TRACE")


def _reconfigure_logging(level: str) -> None:
    settings = get_config()
    configure_logging(
        log_level=level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )


# Commandes du catalogue
app.command()(resolve)
app.command(name="sync-seasons")(sync_seasons)
app.command()(backfill)
app.command(name="sync-imdb-ids")(sync_imdb_ids)
app.command()(search)

# Monter trash_app comme sous-commande
app.add_typer(trash_app, name="trash")


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration Curator")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"API TMDB : {'activée' if config.tmdb_enabled else 'désactivée'}")
    typer.echo(f"Langue TMDB : {config.tmdb_language}")
    typer.echo(f"Corbeille : {config.trash_dir}")
    typer.echo(f"Cadence de synchronisation : {config.sync_pacing_seconds}s")
    typer.echo(f"Cadence identifiants externes : {config.external_ids_pacing_seconds}s")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"Curator v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    # Charge la configuration et configure le logging
    settings = container.config()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )

    # Initialise la base de données (crée les tables si nécessaire)
    container.database.init()

    logger.info("Démarrage de Curator", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
