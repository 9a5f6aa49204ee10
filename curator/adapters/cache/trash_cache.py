"""
Corbeille locale persistante basee sur diskcache.

Le cache utilise diskcache pour la persistence sur disque : les instantanes
survivent aux redemarrages et restent lisibles sans aucun acces reseau ni
acces a la base principale.

Un repertoire par nature d'enregistrement (entrees, demandes) : les
identifiants ne sont uniques qu'a l'interieur d'une meme nature.
Les instantanes n'expirent jamais (pas de TTL) : seule une purge explicite
les retire.
"""

from pathlib import Path
from typing import Optional

from diskcache import Cache
from loguru import logger

from curator.core.entities.trash import TrashedEntry
from curator.core.ports.trash_cache import ITrashCache


class DiskTrashCache(ITrashCache):
    """
    Stockage durable des instantanes de la corbeille.

    Cle : identifiant de l'enregistrement ; valeur : TrashedEntry (pickle).

    Example:
        cache = DiskTrashCache(Path("~/.curator/trash/entries").expanduser())
        cache.put(snapshot)
        for item in cache.list():
            print(item.title, item.deleted_at)
    """

    def __init__(self, cache_dir: Path | str) -> None:
        """
        Initialise la corbeille avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache_dir = Path(cache_dir)
        self._cache = Cache(str(self._cache_dir))

    def list(self) -> list[TrashedEntry]:
        snapshots = []
        for key in self._cache.iterkeys():
            snapshot = self._cache.get(key)
            if snapshot is not None:
                snapshots.append(snapshot)
        snapshots.sort(key=lambda s: s.deleted_at, reverse=True)
        return snapshots

    def get(self, record_id: str) -> Optional[TrashedEntry]:
        return self._cache.get(record_id)

    def put(self, snapshot: TrashedEntry) -> None:
        # set() retourne False si l'ecriture disque a echoue
        if not self._cache.set(snapshot.id, snapshot):
            raise OSError(f"Ecriture de l'instantane {snapshot.id} impossible dans {self._cache_dir}")
        logger.debug("Instantane mis en corbeille", record_id=snapshot.id, kind=snapshot.kind.value)

    def remove(self, record_id: str) -> bool:
        return bool(self._cache.delete(record_id))

    def clear(self) -> int:
        return self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
