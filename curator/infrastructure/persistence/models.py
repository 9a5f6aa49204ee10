"""
Modeles SQLModel pour la base de donnees Curator.

Ces modeles representent les tables de la base principale.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- entries: Entrees du catalogue (films et series) avec metadonnees et liens
- episode_metadata: Metadonnees d'episodes (une ligne par entree/saison/episode)
- requests: Demandes de contenu des utilisateurs

Les champs JSON (*_json) permettent de stocker des listes et dictionnaires
(genres, casting, liens) de maniere serialisee.
"""

import json
from datetime import date, datetime
from typing import Any

from sqlalchemy import DateTime
from sqlmodel import Field, Index, SQLModel, UniqueConstraint

from curator.utils.helpers import utc_now


class EntryModel(SQLModel, table=True):
    """
    Modele representant une entree du catalogue.

    La cle primaire est l'identifiant du fournisseur (chaine numerique).
    Le contenu d'une serie est stocke avec des cles "season_N".
    """

    __tablename__ = "entries"

    id: str = Field(primary_key=True)
    type: str = Field(index=True)  # "movie" ou "series"
    content_json: str | None = None  # JSON: {"watch_link": ...} ou {"season_1": {...}}
    title: str | None = Field(default=None, index=True)
    poster_url: str | None = None
    backdrop_url: str | None = None
    logo_url: str | None = None
    hover_image_url: str | None = None
    overview: str | None = None
    tagline: str | None = None
    status: str | None = None
    vote_average: float | None = None
    vote_count: int | None = None
    runtime: int | None = None  # Duree en minutes (films)
    number_of_seasons: int | None = None
    number_of_episodes: int | None = None
    release_year: int | None = Field(default=None, index=True)
    original_language: str | None = None
    origin_country_json: str | None = None  # JSON: ["US", "GB"]
    imdb_id: str | None = Field(default=None, index=True)  # ex: "tt0137523"
    genres_json: str | None = None  # JSON: [{"id": 18, "name": "Drama"}]
    cast_json: str | None = None  # JSON: [{"id": 17419, "name": ..., "character": ...}]
    overrides_json: str | None = None  # JSON: ["links", "metadata"]
    admin_edited: bool = Field(default=False, index=True)
    media_updated_at: datetime | None = Field(default=None, index=True, sa_type=DateTime(timezone=True))
    created_at: datetime | None = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    @property
    def content(self) -> dict[str, Any]:
        """Retourne le contenu deserialise."""
        if self.content_json:
            return json.loads(self.content_json)
        return {}

    @content.setter
    def content(self, value: dict[str, Any]) -> None:
        """Serialise le contenu en JSON."""
        self.content_json = json.dumps(value)

    @property
    def origin_country(self) -> list[str]:
        """Retourne les pays d'origine deserialises."""
        if self.origin_country_json:
            return json.loads(self.origin_country_json)
        return []

    @origin_country.setter
    def origin_country(self, value: list[str]) -> None:
        self.origin_country_json = json.dumps(value)

    @property
    def genres(self) -> list[dict[str, Any]]:
        """Retourne les genres deserialises."""
        if self.genres_json:
            return json.loads(self.genres_json)
        return []

    @genres.setter
    def genres(self, value: list[dict[str, Any]]) -> None:
        self.genres_json = json.dumps(value)

    @property
    def cast(self) -> list[dict[str, Any]]:
        """Retourne le casting deserialise."""
        if self.cast_json:
            return json.loads(self.cast_json)
        return []

    @cast.setter
    def cast(self, value: list[dict[str, Any]]) -> None:
        self.cast_json = json.dumps(value)

    @property
    def overrides(self) -> list[str]:
        """Retourne les groupes pris en charge par l'admin."""
        if self.overrides_json:
            return json.loads(self.overrides_json)
        return []

    @overrides.setter
    def overrides(self, value: list[str]) -> None:
        self.overrides_json = json.dumps(value)


class EpisodeMetadataModel(SQLModel, table=True):
    """
    Modele representant les metadonnees d'un episode.

    Unicite sur (entry_id, season_number, episode_number) : cle d'upsert.
    """

    __tablename__ = "episode_metadata"
    __table_args__ = (
        UniqueConstraint(
            "entry_id", "season_number", "episode_number", name="uq_episode_metadata_key"
        ),
        Index("ix_episode_metadata_entry_season", "entry_id", "season_number"),
    )

    id: int | None = Field(default=None, primary_key=True)
    entry_id: str = Field(index=True)
    season_number: int
    episode_number: int
    name: str | None = None
    overview: str | None = None
    still_url: str | None = None
    air_date: date | None = None
    runtime: int | None = None
    vote_average: float | None = None
    admin_edited: bool = Field(default=False)
    updated_at: datetime | None = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class RequestModel(SQLModel, table=True):
    """Modele representant une demande de contenu d'un utilisateur."""

    __tablename__ = "requests"

    id: str = Field(primary_key=True)
    user_id: str = Field(index=True)
    request_type: str = Field(default="general")  # movie, tv_season, general
    title: str
    season_number: int | None = None
    message: str = ""
    status: str = Field(default="pending", index=True)
    admin_response: str | None = None
    created_at: datetime | None = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime | None = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
