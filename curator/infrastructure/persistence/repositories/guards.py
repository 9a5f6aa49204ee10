"""
Traduction des erreurs SQLAlchemy vers la taxonomie du domaine.

- Ecriture rejetee : rollback puis StoreWriteFailed
- Lecture impossible (base injoignable) : StoreUnavailable
"""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from curator.core.errors import StoreUnavailable, StoreWriteFailed


@contextmanager
def write_guard(session: Session, operation: str) -> Iterator[None]:
    """
    Encadre une ecriture : toute erreur SQLAlchemy annule la transaction.

    Args :
        session : Session SQLModel de l'ecriture
        operation : Description de l'ecriture (pour le message d'erreur)

    Raises :
        StoreWriteFailed : Si la base a rejete l'ecriture (aucune ligne ecrite)
    """
    try:
        yield
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Ecriture rejetee par la base", operation=operation, error=str(e))
        raise StoreWriteFailed(f"{operation}: {e}") from e


@contextmanager
def read_guard(operation: str) -> Iterator[None]:
    """
    Encadre une lecture.

    Raises :
        StoreUnavailable : Si la base ne repond pas
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Lecture impossible", operation=operation, error=str(e))
        raise StoreUnavailable(f"{operation}: {e}") from e
