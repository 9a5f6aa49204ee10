"""
Utilitaires partages pour les commandes CLI de Curator.

Ce module fournit :
- console : instance Rich Console partagee
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container initialise
- with_container_sync : equivalent synchrone (commandes sans reseau)
- sync_progress : barre de progression Rich pour les lots
"""

from contextlib import contextmanager
from functools import wraps

from loguru import logger as loguru_logger
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from curator.container import Container

console = Console()


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("curator")
    try:
        yield
    finally:
        loguru_logger.enable("curator")


def with_container(requires_db: bool = True):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Ferme le client fournisseur en fin de commande.

    Args:
        requires_db: Si True (defaut), initialise la base de donnees.

    Usage:
        @with_container()
        async def my_command(container, ...):
            config = container.config()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            if requires_db:
                container.database.init()
            try:
                return await func(container, *args, **kwargs)
            finally:
                await container.tmdb_client().close()
        return wrapper
    return decorator


@contextmanager
def with_container_sync(requires_db: bool = True):
    """Container initialise pour les commandes synchrones (corbeille)."""
    container = Container()
    if requires_db:
        container.database.init()
    yield container


def sync_progress() -> Progress:
    """Barre de progression standard des commandes de synchronisation."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=False,
    )
