"""Sous-package CLI commands - re-exporte les commandes publiques."""

from curator.adapters.cli.commands.catalog_commands import (
    backfill,
    resolve,
    search,
    sync_imdb_ids,
    sync_seasons,
)
from curator.adapters.cli.commands.trash_commands import (
    trash_app,
    list_trash,
    delete,
    restore,
    purge,
    empty,
)

__all__ = [
    # catalogue
    "backfill",
    "resolve",
    "search",
    "sync_imdb_ids",
    "sync_seasons",
    # corbeille
    "trash_app",
    "list_trash",
    "delete",
    "restore",
    "purge",
    "empty",
]
