"""
Implementation SQLModel du repository Entry.

Implemente l'interface IEntryRepository pour la persistance des entrees
du catalogue (films et series) via SQLModel.

Le contenu d'une serie est persiste avec des cles "season_N" ; les cles
mal formees sont ignorees a la lecture.
"""

from typing import Optional

from sqlalchemy import Integer, cast, or_
from sqlmodel import Session, col, select

from curator.core.entities.entry import (
    CastMember,
    Entry,
    EntryType,
    Genre,
    content_from_dict,
    content_to_dict,
)
from curator.core.ports.repositories import EntryFilters, IEntryRepository, SortOrder
from curator.core.value_objects.identifiers import is_catalog_id
from curator.core.value_objects.overrides import FieldGroup
from curator.infrastructure.persistence.models import EntryModel
from curator.infrastructure.persistence.repositories.guards import read_guard, write_guard
from curator.utils.helpers import as_utc


class SQLModelEntryRepository(IEntryRepository):
    """
    Repository SQLModel pour les entrees du catalogue.

    Implemente IEntryRepository avec conversion bidirectionnelle
    entre l'entite Entry (domaine) et EntryModel (persistance).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: EntryModel) -> Entry:
        """
        Convertit un modele DB en entite domaine.

        Args :
            model : Le modele EntryModel depuis la DB

        Retourne :
            L'entite Entry correspondante
        """
        entry_type = EntryType(model.type)
        overrides = FieldGroup.from_names(model.overrides)
        # Ancien schema : seul le booleen admin_edited etait renseigne
        if model.admin_edited:
            overrides |= FieldGroup.METADATA

        return Entry(
            id=model.id,
            type=entry_type,
            content=content_from_dict(entry_type, model.content),
            title=model.title,
            poster_url=model.poster_url,
            backdrop_url=model.backdrop_url,
            logo_url=model.logo_url,
            hover_image_url=model.hover_image_url,
            overview=model.overview,
            tagline=model.tagline,
            status=model.status,
            vote_average=model.vote_average,
            vote_count=model.vote_count,
            runtime=model.runtime,
            number_of_seasons=model.number_of_seasons,
            number_of_episodes=model.number_of_episodes,
            release_year=model.release_year,
            original_language=model.original_language,
            origin_country=tuple(model.origin_country),
            imdb_id=model.imdb_id,
            genres=tuple(Genre(id=g["id"], name=g.get("name", "")) for g in model.genres),
            cast=tuple(
                CastMember(
                    id=c["id"],
                    name=c.get("name", ""),
                    character=c.get("character"),
                    profile_path=c.get("profile_path"),
                )
                for c in model.cast
            ),
            overrides=overrides,
            media_updated_at=as_utc(model.media_updated_at),
            created_at=as_utc(model.created_at),
        )

    def _apply_to_model(self, entity: Entry, model: EntryModel) -> EntryModel:
        """
        Copie les valeurs d'une entite domaine dans un modele DB.

        Args :
            entity : L'entite Entry du domaine
            model : Le modele a mettre a jour

        Retourne :
            Le modele mis a jour
        """
        model.type = entity.type.value
        model.content = content_to_dict(entity.content)
        model.title = entity.title
        model.poster_url = entity.poster_url
        model.backdrop_url = entity.backdrop_url
        model.logo_url = entity.logo_url
        model.hover_image_url = entity.hover_image_url
        model.overview = entity.overview
        model.tagline = entity.tagline
        model.status = entity.status
        model.vote_average = entity.vote_average
        model.vote_count = entity.vote_count
        model.runtime = entity.runtime
        model.number_of_seasons = entity.number_of_seasons
        model.number_of_episodes = entity.number_of_episodes
        model.release_year = entity.release_year
        model.original_language = entity.original_language
        model.origin_country = list(entity.origin_country)
        model.imdb_id = entity.imdb_id
        model.genres = [{"id": g.id, "name": g.name} for g in entity.genres]
        model.cast = [
            {
                "id": c.id,
                "name": c.name,
                "character": c.character,
                "profile_path": c.profile_path,
            }
            for c in entity.cast
        ]
        model.overrides = entity.overrides.to_names()
        model.admin_edited = entity.admin_edited
        model.media_updated_at = as_utc(entity.media_updated_at)
        if entity.created_at is not None:
            model.created_at = as_utc(entity.created_at)
        return model

    def get_by_id(self, entry_id: str) -> Optional[Entry]:
        """Recupere une entree par son identifiant."""
        with read_guard(f"lecture de l'entree {entry_id}"):
            model = self._session.get(EntryModel, str(entry_id))
        if model:
            return self._to_entity(model)
        return None

    def get_many(self, entry_ids: list[str]) -> dict[str, Entry]:
        """Recupere plusieurs entrees en une requete."""
        if not entry_ids:
            return {}
        statement = select(EntryModel).where(col(EntryModel.id).in_([str(i) for i in entry_ids]))
        with read_guard("lecture groupee des entrees"):
            models = self._session.exec(statement).all()
        return {model.id: self._to_entity(model) for model in models}

    def upsert(self, entry: Entry) -> Entry:
        """Cree ou remplace une entree (cle : identifiant)."""
        with write_guard(self._session, f"ecriture de l'entree {entry.id}"):
            model = self._session.get(EntryModel, entry.id)
            if model is None:
                model = EntryModel(id=entry.id, type=entry.type.value)
            self._apply_to_model(entry, model)
            self._session.add(model)
            self._session.commit()
            self._session.refresh(model)
        return self._to_entity(model)

    def delete(self, entry_id: str) -> bool:
        """Supprime une entree. Retourne True si une ligne a ete supprimee."""
        with write_guard(self._session, f"suppression de l'entree {entry_id}"):
            model = self._session.get(EntryModel, str(entry_id))
            if model is None:
                return False
            self._session.delete(model)
            self._session.commit()
        return True

    def list_entries(
        self,
        entry_type: Optional[EntryType] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Entry]:
        """Liste les entrees par identifiant numerique croissant."""
        statement = select(EntryModel)
        if entry_type is not None:
            statement = statement.where(EntryModel.type == entry_type.value)
        statement = statement.order_by(cast(EntryModel.id, Integer)).offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        with read_guard("liste des entrees"):
            models = self._session.exec(statement).all()
        return [self._to_entity(model) for model in models]

    def search(self, query: str, filters: EntryFilters) -> list[Entry]:
        """
        Recherche des entrees.

        Une requete numerique cible l'identifiant exact ; sinon recherche
        insensible a la casse dans le titre.

        Args :
            query : Texte ou identifiant recherche (vide = tout)
            filters : Filtres et tri

        Retourne :
            Liste des entrees correspondantes (au plus filters.limit)
        """
        statement = select(EntryModel)

        query = (query or "").strip()
        if query:
            if is_catalog_id(query):
                statement = statement.where(EntryModel.id == query)
            else:
                statement = statement.where(col(EntryModel.title).ilike(f"%{query}%"))

        if filters.entry_type is not None:
            statement = statement.where(EntryModel.type == filters.entry_type.value)
        if filters.missing_poster:
            statement = statement.where(_is_blank(EntryModel.poster_url))
        if filters.missing_backdrop:
            statement = statement.where(_is_blank(EntryModel.backdrop_url))
        if filters.missing_logo:
            statement = statement.where(_is_blank(EntryModel.logo_url))
        if filters.missing_overview:
            statement = statement.where(_is_blank(EntryModel.overview))
        if filters.edited_since is not None:
            since = as_utc(filters.edited_since)
            statement = statement.where(col(EntryModel.media_updated_at) >= since)

        statement = statement.order_by(*_ORDERINGS[filters.sort_by]()).limit(filters.limit)

        with read_guard("recherche des entrees"):
            models = self._session.exec(statement).all()
        return [self._to_entity(model) for model in models]


def _is_blank(column):
    return or_(col(column).is_(None), column == "")


_ORDERINGS = {
    SortOrder.NONE: lambda: (cast(EntryModel.id, Integer),),
    SortOrder.RECENT: lambda: (
        col(EntryModel.media_updated_at).desc().nulls_last(),
        col(EntryModel.created_at).desc(),
    ),
    SortOrder.YEAR_DESC: lambda: (col(EntryModel.release_year).desc().nulls_last(),),
    SortOrder.YEAR_ASC: lambda: (col(EntryModel.release_year).asc().nulls_last(),),
    SortOrder.NAME: lambda: (col(EntryModel.title).asc(),),
    SortOrder.RATING: lambda: (col(EntryModel.vote_average).desc().nulls_last(),),
}
