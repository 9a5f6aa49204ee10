"""
Implementations SQLModel des repositories.

Ce module contient les implementations concretes des interfaces repository
definies dans curator/core/ports/repositories.py, utilisant SQLModel pour
la persistance.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit une session SQLModel via injection de dependances
- Convertit entre entites de domaine (dataclass) et modeles DB (SQLModel)
- Traduit les erreurs SQLAlchemy en StoreWriteFailed / StoreUnavailable
"""

from curator.infrastructure.persistence.repositories.entry_repository import (
    SQLModelEntryRepository,
)
from curator.infrastructure.persistence.repositories.episode_repository import (
    SQLModelEpisodeRepository,
)
from curator.infrastructure.persistence.repositories.request_repository import (
    SQLModelRequestRepository,
)

__all__ = [
    "SQLModelEntryRepository",
    "SQLModelEpisodeRepository",
    "SQLModelRequestRepository",
]
