"""
Fonctions utilitaires partagees dans le projet Curator.

- utc_now : horodatage courant, toujours avec fuseau (UTC)
- as_utc : normalisation d'une date lue en base ou fournie sans fuseau
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Date courante en UTC, avec fuseau."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Retourne la date avec le fuseau UTC.

    SQLite ne conserve pas le fuseau : une date sans fuseau est consideree
    comme deja exprimee en UTC. Une date avec un autre fuseau est convertie.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
