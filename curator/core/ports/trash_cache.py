"""
Interface port pour la corbeille locale.

La corbeille est un cache durable, indépendant de la base principale :
elle doit rester lisible même si aucune opération réseau n'a encore réussi.
"""

from abc import ABC, abstractmethod
from typing import Optional

from curator.core.entities.trash import TrashedEntry


class ITrashCache(ABC):
    """Stockage des instantanés de la corbeille."""

    @abstractmethod
    def list(self) -> list[TrashedEntry]:
        """Instantanés, les plus récemment supprimés en premier."""
        ...

    @abstractmethod
    def get(self, record_id: str) -> Optional[TrashedEntry]:
        ...

    @abstractmethod
    def put(self, snapshot: TrashedEntry) -> None:
        """Ajoute (ou remplace) un instantané."""
        ...

    @abstractmethod
    def remove(self, record_id: str) -> bool:
        """Retire un instantané. Retourne True s'il existait."""
        ...

    @abstractmethod
    def clear(self) -> int:
        """Vide la corbeille. Retourne le nombre d'instantanés retirés."""
        ...
