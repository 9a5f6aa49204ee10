"""
Session d'edition : copies de travail en attente de sauvegarde.

Remplace l'etat implicite "brouillon" d'un editeur par un objet explicite :
chaque copie de travail a une duree de vie (TTL) et peut etre invalidee.
Une copie expiree n'est plus retournee ; la sauvegarde doit alors repartir
des valeurs stockees ou d'un nouveau rafraichissement.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from loguru import logger

from curator.core.entities.draft import WorkingCopy
from curator.core.entities.entry import EntryType, EpisodeMetadata
from curator.utils.helpers import utc_now


class DraftSession:
    """
    Copies de travail d'un operateur, indexees par identifiant d'entree.

    Example:
        session = DraftSession(ttl_seconds=1800)
        copy = await reconciliation.refresh(entry, session=session)
        ...
        session.get(entry.id)  # None apres expiration
    """

    def __init__(
        self,
        ttl_seconds: int = 1800,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or utc_now
        self._drafts: dict[str, WorkingCopy] = {}

    def now(self) -> datetime:
        return self._clock()

    def _is_expired(self, copy: WorkingCopy) -> bool:
        return copy.staged_at is not None and self._clock() - copy.staged_at > self._ttl

    def stage(self, copy: WorkingCopy) -> WorkingCopy:
        """Enregistre (ou remplace) la copie de travail d'une entree."""
        if copy.staged_at is None:
            copy.staged_at = self._clock()
        previous = self._drafts.get(copy.entry_id)
        # Les episodes deja rafraichis restent attaches a la nouvelle copie
        if previous is not None and not self._is_expired(previous):
            for key, episode in previous.episodes.items():
                copy.episodes.setdefault(key, episode)
        self._drafts[copy.entry_id] = copy
        return copy

    def stage_episode(
        self, entry_id: str, entry_type: EntryType, episode: EpisodeMetadata
    ) -> WorkingCopy:
        """Attache un episode rafraichi a la copie de l'entree (creee si besoin)."""
        copy = self.get(entry_id)
        if copy is None:
            copy = self.stage(WorkingCopy(entry_id=entry_id, type=entry_type))
        copy.episodes[(episode.season_number, episode.episode_number)] = episode
        return copy

    def get(self, entry_id: str) -> Optional[WorkingCopy]:
        """Copie de travail courante, None si absente ou expiree."""
        copy = self._drafts.get(entry_id)
        if copy is None:
            return None
        if self._is_expired(copy):
            logger.debug("Copie de travail expiree", entry_id=entry_id)
            del self._drafts[entry_id]
            return None
        return copy

    def discard(self, entry_id: str) -> bool:
        """Invalide la copie d'une entree. Retourne True si elle existait."""
        return self._drafts.pop(entry_id, None) is not None

    def clear(self) -> None:
        self._drafts.clear()

    def __contains__(self, entry_id: object) -> bool:
        return isinstance(entry_id, str) and self.get(entry_id) is not None

    def __len__(self) -> int:
        return len(self._drafts)
