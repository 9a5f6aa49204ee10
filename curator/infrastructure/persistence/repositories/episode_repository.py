"""
Implementation SQLModel du repository EpisodeMetadata.

Implemente l'interface IEpisodeRepository pour la persistance des
metadonnees d'episodes. La cle d'upsert est (entree, saison, episode).
"""

from typing import Optional

from sqlmodel import Session, col, select

from curator.core.entities.entry import EpisodeMetadata
from curator.core.ports.repositories import IEpisodeRepository, UpsertReport
from curator.infrastructure.persistence.models import EpisodeMetadataModel
from curator.infrastructure.persistence.repositories.guards import read_guard, write_guard
from curator.utils.helpers import as_utc, utc_now


class SQLModelEpisodeRepository(IEpisodeRepository):
    """
    Repository SQLModel pour les metadonnees d'episodes.

    Implemente IEpisodeRepository avec conversion bidirectionnelle
    entre l'entite EpisodeMetadata (domaine) et EpisodeMetadataModel (persistance).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: EpisodeMetadataModel) -> EpisodeMetadata:
        """Convertit un modele DB en entite domaine."""
        return EpisodeMetadata(
            id=model.id,
            entry_id=model.entry_id,
            season_number=model.season_number,
            episode_number=model.episode_number,
            name=model.name,
            overview=model.overview,
            still_url=model.still_url,
            air_date=model.air_date,
            runtime=model.runtime,
            vote_average=model.vote_average,
            admin_edited=model.admin_edited,
            updated_at=as_utc(model.updated_at),
        )

    def _find(self, entry_id: str, season_number: int, episode_number: int) -> Optional[EpisodeMetadataModel]:
        statement = select(EpisodeMetadataModel).where(
            EpisodeMetadataModel.entry_id == entry_id,
            EpisodeMetadataModel.season_number == season_number,
            EpisodeMetadataModel.episode_number == episode_number,
        )
        return self._session.exec(statement).first()

    def _stage(self, episode: EpisodeMetadata) -> EpisodeMetadataModel:
        """
        Prepare l'insertion ou la mise a jour d'un episode (sans commit).

        Retourne :
            Le modele ajoute a la session
        """
        model = self._find(episode.entry_id, episode.season_number, episode.episode_number)
        if model is None:
            model = EpisodeMetadataModel(
                entry_id=episode.entry_id,
                season_number=episode.season_number,
                episode_number=episode.episode_number,
            )
        model.name = episode.name
        model.overview = episode.overview
        model.still_url = episode.still_url
        model.air_date = episode.air_date
        model.runtime = episode.runtime
        model.vote_average = episode.vote_average
        model.admin_edited = episode.admin_edited
        model.updated_at = as_utc(episode.updated_at) or utc_now()
        self._session.add(model)
        return model

    def list_episodes(
        self, entry_id: str, season_number: Optional[int] = None
    ) -> list[EpisodeMetadata]:
        """
        Recupere les episodes d'une entree.

        Args :
            entry_id : Identifiant de l'entree
            season_number : Filtre optionnel par numero de saison

        Retourne :
            Episodes tries par saison puis episode
        """
        statement = select(EpisodeMetadataModel).where(EpisodeMetadataModel.entry_id == entry_id)
        if season_number is not None:
            statement = statement.where(EpisodeMetadataModel.season_number == season_number)
        statement = statement.order_by(
            col(EpisodeMetadataModel.season_number), col(EpisodeMetadataModel.episode_number)
        )
        with read_guard(f"lecture des episodes de {entry_id}"):
            models = self._session.exec(statement).all()
        return [self._to_entity(model) for model in models]

    def upsert_episodes(
        self, entry_id: str, season_number: int, episodes: list[EpisodeMetadata]
    ) -> UpsertReport:
        """
        Ecrit un lot d'episodes d'une saison en une seule transaction.

        En cas d'echec, aucune ligne n'est ecrite (rollback).
        """
        report = UpsertReport(entry_id=entry_id, season_number=season_number)
        if not episodes:
            return report

        for episode in episodes:
            if episode.entry_id != entry_id or episode.season_number != season_number:
                raise ValueError(
                    f"Episode {episode.key} hors du lot ({entry_id}, saison {season_number})"
                )

        with write_guard(self._session, f"ecriture de la saison {season_number} de {entry_id}"):
            for episode in sorted(episodes, key=lambda e: e.episode_number):
                self._stage(episode)
                report.written.append(episode.episode_number)
            self._session.commit()
        return report

    def upsert_episode(self, episode: EpisodeMetadata) -> EpisodeMetadata:
        """Cree ou remplace un episode."""
        with write_guard(self._session, f"ecriture de l'episode {episode.key}"):
            model = self._stage(episode)
            self._session.commit()
            self._session.refresh(model)
        return self._to_entity(model)

    def delete_episode(self, entry_id: str, season_number: int, episode_number: int) -> bool:
        """Supprime un episode. Retourne True si une ligne a ete supprimee."""
        with write_guard(self._session, f"suppression de l'episode {entry_id}/{season_number}/{episode_number}"):
            model = self._find(entry_id, season_number, episode_number)
            if model is None:
                return False
            self._session.delete(model)
            self._session.commit()
        return True

    def _delete_where(self, operation: str, *conditions) -> int:
        statement = select(EpisodeMetadataModel).where(*conditions)
        with write_guard(self._session, operation):
            models = self._session.exec(statement).all()
            for model in models:
                self._session.delete(model)
            self._session.commit()
        return len(models)

    def delete_season(self, entry_id: str, season_number: int) -> int:
        """Supprime tous les episodes d'une saison. Retourne le nombre supprime."""
        return self._delete_where(
            f"suppression de la saison {season_number} de {entry_id}",
            EpisodeMetadataModel.entry_id == entry_id,
            EpisodeMetadataModel.season_number == season_number,
        )

    def delete_all(self, entry_id: str) -> int:
        """Supprime tous les episodes d'une entree."""
        return self._delete_where(
            f"suppression des episodes de {entry_id}",
            EpisodeMetadataModel.entry_id == entry_id,
        )
