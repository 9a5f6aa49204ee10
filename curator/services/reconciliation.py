"""
Moteur de reconciliation des metadonnees.

Fait coexister deux sources pour une meme entree : les valeurs choisies par
l'administrateur (stockees en base) et celles du fournisseur (TMDB).
Une seule regle de precedence :

- Un groupe de champs pris en charge par l'admin (FieldGroup) n'est jamais
  ecrase par une ecriture automatique (pre-remplissage, synchronisation).
- Seul un rafraichissement explicite suivi d'une sauvegarde peut remplacer
  ces valeurs ; la sauvegarde re-derive alors le drapeau.
- Les episodes portent leur propre drapeau : une synchronisation de saison
  ignore les episodes edites par l'admin, quel que soit le drapeau de l'entree.
"""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from curator.adapters.api.retry import SleepFunc, call_with_retry
from curator.core.entities.draft import WorkingCopy
from curator.core.entities.entry import (
    EPISODE_FIELDS,
    CastMember,
    Entry,
    EntryType,
    EpisodeMetadata,
    MovieContent,
    SeasonLinks,
    apply_metadata,
)
from curator.core.errors import CuratorError, NotFound, ProviderUnavailable
from curator.core.ports.provider import (
    IMetadataProvider,
    ProviderDetails,
    ProviderEpisode,
    ProviderImages,
)
from curator.core.ports.repositories import IEntryRepository, IEpisodeRepository
from curator.core.value_objects.identifiers import parse_catalog_id
from curator.core.value_objects.overrides import FieldGroup, OverridePolicy, writable_groups
from curator.services.batch_sync import BatchReport, BatchSyncOrchestrator
from curator.services.rate_limiter import TokenBucket
from curator.services.session import DraftSession
from curator.utils.helpers import utc_now


@dataclass
class SaveResult:
    """
    Resultat d'une sauvegarde.

    Attributs :
        entry : Entree telle qu'ecrite en base
        backfill : Bilan du backfill des episodes (series non protegees), sinon None
        backfill_error : Message si le backfill n'a pas pu demarrer
    """

    entry: Entry
    backfill: Optional[BatchReport] = None
    backfill_error: Optional[str] = None


@dataclass
class Candidate:
    """
    Interpretations film et serie d'un identifiant.

    Les deux interpretations sont conservees pour permettre a l'operateur
    de basculer manuellement.
    """

    id: str
    preferred: EntryType
    movie: Optional[ProviderDetails] = None
    series: Optional[ProviderDetails] = None

    @property
    def details(self) -> ProviderDetails:
        """Details de l'interpretation retenue."""
        chosen = self.series if self.preferred == EntryType.SERIES else self.movie
        if chosen is None:
            raise NotFound(f"Aucune interpretation {self.preferred.value} pour {self.id}")
        return chosen

    def switch(self) -> "Candidate":
        """Bascule vers l'autre interpretation si elle existe."""
        other = EntryType.MOVIE if self.preferred == EntryType.SERIES else EntryType.SERIES
        if (self.movie if other == EntryType.MOVIE else self.series) is None:
            return self
        return replace(self, preferred=other)


@dataclass
class SeasonSyncResult:
    """Episodes ecrits et episodes proteges (ignores) d'une saison."""

    entry_id: str
    season_number: int
    written: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)


class PrefillStatus(str, Enum):
    """Resultat du pre-remplissage des champs de presentation."""

    UPDATED = "updated"
    PROTECTED = "protected"


@dataclass
class PrefillOutcome:
    """Bilan du pre-remplissage d'une entree."""

    entry_id: str
    status: PrefillStatus
    seasons: int = 0
    episodes: int = 0
    seasons_failed: int = 0


# Champs a verifier pour le filtre "metadonnees manquantes"
_CHECKED_FIELDS = ("poster_url", "backdrop_url", "logo_url", "overview")

# Champs completes par le pre-remplissage "champs manquants uniquement"
FILLABLE_FIELDS = (
    "poster_url",
    "backdrop_url",
    "logo_url",
    "vote_average",
    "vote_count",
    "original_language",
    "origin_country",
)


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == ()


def _clean_links(links: list[str]) -> list[str]:
    return [link.strip() for link in links if link and link.strip()]


async def _gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """
    Attend tous les appels puis leve la premiere erreur rencontree.

    Chaque appel va a son terme : aucune exception n'est laissee sans lecteur
    lorsqu'un seul appel echoue.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class ReconciliationService:
    """
    Service de reconciliation entre la base et le fournisseur.

    Operations unitaires : elles levent directement leurs erreurs
    (ProviderUnavailable, NotFound, StoreWriteFailed, InvalidIdentifier).
    """

    def __init__(
        self,
        entry_repo: IEntryRepository,
        episode_repo: IEpisodeRepository,
        provider: IMetadataProvider,
        limiter: Optional[TokenBucket] = None,
        cast_limit: int = 12,
        logo_language: str = "en",
        retry_attempts: int = 3,
        retry_sleep: Optional[SleepFunc] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._entry_repo = entry_repo
        self._episode_repo = episode_repo
        self._provider = provider
        self._limiter = limiter or TokenBucket()
        self._cast_limit = cast_limit
        self._logo_language = logo_language
        self._retry_attempts = retry_attempts
        self._retry_sleep = retry_sleep
        self._clock = clock or utc_now

    @property
    def provider(self) -> IMetadataProvider:
        return self._provider

    def orchestrator(self) -> BatchSyncOrchestrator:
        """Orchestrateur partageant le limiteur et la politique de relance."""
        return BatchSyncOrchestrator(
            self,
            self._entry_repo,
            self._limiter,
            max_attempts=self._retry_attempts,
            retry_sleep=self._retry_sleep,
        )

    def _get_entry(self, entry_id: str) -> Entry:
        entry = self._entry_repo.get_by_id(entry_id)
        if entry is None:
            raise NotFound(f"Entree {entry_id} introuvable")
        return entry

    def _metadata_from_provider(
        self,
        details: ProviderDetails,
        images: ProviderImages,
        cast: Optional[tuple[CastMember, ...]] = None,
    ) -> dict[str, Any]:
        """Champs de presentation derives des reponses du fournisseur."""
        values: dict[str, Any] = {
            "title": details.title,
            "poster_url": details.poster_url,
            "backdrop_url": details.backdrop_url,
            "logo_url": images.best_logo_url(self._logo_language),
            "overview": details.overview,
            "tagline": details.tagline,
            "status": details.status,
            "vote_average": details.vote_average,
            "vote_count": details.vote_count,
            "release_year": details.release_year,
            "original_language": details.original_language,
            "origin_country": details.origin_country,
            "genres": details.genres,
        }
        if details.type == EntryType.MOVIE:
            values["runtime"] = details.runtime
        else:
            values["number_of_seasons"] = details.number_of_seasons
            values["number_of_episodes"] = details.number_of_episodes
        if cast is not None:
            values["cast"] = tuple(cast[: self._cast_limit])
        return values

    def _episode_from_provider(
        self, entry_id: str, season_number: int, episode: ProviderEpisode
    ) -> EpisodeMetadata:
        return EpisodeMetadata(
            entry_id=entry_id,
            season_number=season_number,
            episode_number=episode.episode_number,
            name=episode.name,
            overview=episode.overview,
            still_url=episode.still_url,
            air_date=episode.air_date,
            runtime=episode.runtime,
            vote_average=episode.vote_average,
            admin_edited=False,
            updated_at=self._clock(),
        )

    # ------------------------------------------------------------------
    # Edition explicite (operateur)
    # ------------------------------------------------------------------

    async def refresh(
        self,
        entry: Entry,
        override_policy: OverridePolicy = OverridePolicy.KEEP,
        session: Optional[DraftSession] = None,
    ) -> WorkingCopy:
        """
        Charge les valeurs courantes du fournisseur dans une copie de travail.

        Interroge toujours le fournisseur (details, images, casting) : aucune
        reponse n'est reutilisee d'un appel precedent. Rien n'est ecrit en base.

        Args:
            entry: Entree a rafraichir
            override_policy: KEEP conserve le drapeau admin, CLEAR le retire
            session: Session d'edition ou enregistrer la copie (optionnel)

        Returns:
            La copie de travail

        Raises:
            ProviderUnavailable: Echec d'un appel ; la copie precedente de la
                session reste intacte
        """
        details, images, cast = await _gather_all(
            self._provider.fetch_details(entry.id, entry.type),
            self._provider.fetch_images(entry.id, entry.type),
            self._provider.fetch_credits(entry.id, entry.type),
        )

        overrides = entry.overrides
        if override_policy == OverridePolicy.CLEAR:
            overrides &= ~FieldGroup.METADATA

        copy = WorkingCopy(
            entry_id=entry.id,
            type=entry.type,
            fields=self._metadata_from_provider(details, images, cast),
            overrides=overrides,
            staged_at=session.now() if session is not None else self._clock(),
        )
        if session is not None:
            session.stage(copy)

        logger.info(
            "Entree rafraichie depuis le fournisseur",
            entry_id=entry.id,
            policy=override_policy.value,
        )
        return copy

    async def save(
        self,
        entry: Entry,
        fields: dict[str, Any],
        admin_edited: bool,
        session: Optional[DraftSession] = None,
    ) -> SaveResult:
        """
        Ecrit les valeurs fournies telles quelles et fixe le drapeau admin.

        Ne re-interroge jamais le fournisseur pour les champs de l'entree.
        Pour une serie non protegee, declenche ensuite le backfill des
        episodes de toutes les saisons (episodes edites par l'admin exclus).

        Args:
            entry: Entree a sauvegarder
            fields: Valeurs des champs de presentation (ex: copie de travail)
            admin_edited: Nouvel etat du groupe METADATA
            session: Session d'edition dont la copie est invalidee apres ecriture

        Raises:
            ValueError: Champ non modifiable dans fields
            StoreWriteFailed: Ecriture rejetee
        """
        updated = apply_metadata(replace(entry), fields)
        if admin_edited:
            updated.overrides = entry.overrides | FieldGroup.METADATA
        else:
            updated.overrides = entry.overrides & ~FieldGroup.METADATA
        updated.media_updated_at = self._clock()

        stored = self._entry_repo.upsert(updated)
        if session is not None:
            session.discard(entry.id)
        logger.info("Entree sauvegardee", entry_id=entry.id, admin_edited=admin_edited)

        result = SaveResult(entry=stored)
        if stored.type == EntryType.SERIES and not admin_edited:
            try:
                result.backfill = await self.orchestrator().sync_seasons(stored.id)
            except CuratorError as e:
                result.backfill_error = str(e)
        return result

    async def resolve_candidate(self, raw_id: object) -> Candidate:
        """
        Determine si un identifiant designe un film ou une serie.

        Les deux interpretations sont interrogees en parallele. La serie est
        preferee si elle annonce au moins une saison, sinon le film ; une
        seule interpretation resolue l'emporte.

        Raises:
            InvalidIdentifier: Identifiant mal forme (aucun appel reseau)
            NotFound: Aucune interpretation n'existe
            ProviderUnavailable: Aucune interpretation resolue et au moins un
                echec autre que 404
        """
        media_id = parse_catalog_id(raw_id)
        movie_res, series_res = await asyncio.gather(
            self._provider.fetch_details(media_id, EntryType.MOVIE),
            self._provider.fetch_details(media_id, EntryType.SERIES),
            return_exceptions=True,
        )

        resolved: dict[EntryType, Optional[ProviderDetails]] = {}
        failures: list[ProviderUnavailable] = []
        for entry_type, res in ((EntryType.MOVIE, movie_res), (EntryType.SERIES, series_res)):
            if isinstance(res, ProviderDetails):
                resolved[entry_type] = res
            elif isinstance(res, ProviderUnavailable):
                failures.append(res)
                resolved[entry_type] = None
            elif isinstance(res, BaseException):
                raise res
        movie = resolved[EntryType.MOVIE]
        series = resolved[EntryType.SERIES]

        if series is not None and (series.number_of_seasons or 0) > 0:
            preferred = EntryType.SERIES
        elif movie is not None:
            preferred = EntryType.MOVIE
        elif series is not None:
            preferred = EntryType.SERIES
        else:
            hard = [f for f in failures if not f.is_not_found]
            if hard:
                raise hard[0]
            raise NotFound(f"Aucun film ni serie pour l'identifiant {media_id}")

        logger.debug("Identifiant resolu", media_id=media_id, type=preferred.value)
        return Candidate(id=media_id, preferred=preferred, movie=movie, series=series)

    def mark_admin_edited(self, entry_id: str, admin_edited: bool = True) -> Entry:
        """Change uniquement le drapeau METADATA d'une entree."""
        entry = self._get_entry(entry_id)
        if admin_edited:
            entry.overrides |= FieldGroup.METADATA
        else:
            entry.overrides &= ~FieldGroup.METADATA
        return self._entry_repo.upsert(entry)

    @staticmethod
    def missing_fields(entry: Entry) -> list[str]:
        """Champs visuels ou textuels absents (affiche, fond, logo, resume)."""
        return [name for name in _CHECKED_FIELDS if not getattr(entry, name)]

    @staticmethod
    def fillable_fields(entry: Entry) -> list[str]:
        """Champs visuels, de note ou d'origine vides, completables depuis le fournisseur."""
        return [name for name in FILLABLE_FIELDS if _is_missing(getattr(entry, name))]

    # ------------------------------------------------------------------
    # Ecritures automatiques
    # ------------------------------------------------------------------

    async def backfill_season(self, entry_id: str, season_number: int) -> SeasonSyncResult:
        """
        Synchronise les episodes d'une saison (une ecriture groupee).

        Les episodes dont le drapeau admin_edited est vrai en base sont
        exclus du lot et ne sont jamais modifies.

        Raises:
            ProviderUnavailable: Saison indisponible chez le fournisseur
            StoreWriteFailed: Ecriture du lot rejetee (aucune ligne ecrite)
        """
        detail = await self._provider.fetch_season_details(entry_id, season_number)
        existing = self._episode_repo.list_episodes(entry_id, season_number)
        protected = {e.episode_number for e in existing if e.admin_edited}

        result = SeasonSyncResult(entry_id=entry_id, season_number=season_number)
        episodes = []
        for episode in detail.episodes:
            if episode.episode_number in protected:
                result.skipped.append(episode.episode_number)
                continue
            episodes.append(self._episode_from_provider(entry_id, season_number, episode))

        if episodes:
            report = self._episode_repo.upsert_episodes(entry_id, season_number, episodes)
            result.written = list(report.written)

        logger.debug(
            "Saison synchronisee",
            entry_id=entry_id,
            season=season_number,
            written=len(result.written),
            skipped=len(result.skipped),
        )
        return result

    async def prefill_entry(self, entry: Entry, include_episodes: bool = True) -> PrefillOutcome:
        """
        Pre-remplit une entree depuis le fournisseur (details et images).

        Les champs de presentation ne sont ecrits que si le groupe METADATA
        n'est pas pris en charge par l'admin. Pour une serie, les episodes de
        toutes les saisons regulieres sont ensuite synchronises, cadences par
        le limiteur ; l'echec d'une saison est compte sans interrompre les autres.

        Raises:
            ProviderUnavailable: Details ou images indisponibles
            StoreWriteFailed: Ecriture de l'entree rejetee
        """
        details, images = await _gather_all(
            self._provider.fetch_details(entry.id, entry.type),
            self._provider.fetch_images(entry.id, entry.type),
        )

        if FieldGroup.METADATA in writable_groups(entry.overrides):
            updated = apply_metadata(replace(entry), self._metadata_from_provider(details, images))
            updated.media_updated_at = self._clock()
            self._entry_repo.upsert(updated)
            outcome = PrefillOutcome(entry_id=entry.id, status=PrefillStatus.UPDATED)
        else:
            logger.debug("Metadonnees protegees, ecriture ignoree", entry_id=entry.id)
            outcome = PrefillOutcome(entry_id=entry.id, status=PrefillStatus.PROTECTED)

        if entry.type == EntryType.SERIES and include_episodes:
            for season_number in details.regular_seasons:
                await self._limiter.acquire()
                try:
                    season = await call_with_retry(
                        self.backfill_season,
                        entry.id,
                        season_number,
                        max_attempts=self._retry_attempts,
                        sleep=self._retry_sleep,
                    )
                except CuratorError as e:
                    outcome.seasons_failed += 1
                    logger.warning(
                        "Echec de la synchronisation d'une saison",
                        entry_id=entry.id,
                        season=season_number,
                        error=str(e),
                    )
                    continue
                outcome.seasons += 1
                outcome.episodes += len(season.written)

        return outcome

    async def fill_missing_fields(self, entry: Entry) -> list[str]:
        """
        Complete uniquement les champs vides d'une entree (affiches, note, origine).

        Les champs deja renseignes ne sont jamais modifies. Une entree dont
        les metadonnees sont prises en charge par l'admin n'est pas touchee,
        et une entree complete ne declenche aucun appel.

        Returns:
            Noms des champs ecrits (vide si rien n'a change)

        Raises:
            ProviderUnavailable: Details ou images indisponibles
            StoreWriteFailed: Ecriture de l'entree rejetee
        """
        if FieldGroup.METADATA not in writable_groups(entry.overrides):
            logger.debug("Metadonnees protegees, completion ignoree", entry_id=entry.id)
            return []

        missing = self.fillable_fields(entry)
        if not missing:
            return []

        details, images = await _gather_all(
            self._provider.fetch_details(entry.id, entry.type),
            self._provider.fetch_images(entry.id, entry.type),
        )
        upstream = self._metadata_from_provider(details, images)
        patch = {name: upstream[name] for name in missing if not _is_missing(upstream[name])}
        if not patch:
            return []

        updated = apply_metadata(replace(entry), patch)
        updated.media_updated_at = self._clock()
        self._entry_repo.upsert(updated)
        logger.debug("Champs manquants completes", entry_id=entry.id, fields=sorted(patch))
        return list(patch)

    async def sync_external_ids(self, entry: Entry) -> Entry:
        """
        Renseigne l'identifiant IMDb d'une entree depuis le fournisseur.

        Seul imdb_id est ecrit : c'est un identifiant, pas un champ de
        presentation, il n'est donc pas soumis au drapeau admin.

        Raises:
            ProviderUnavailable: Identifiants externes indisponibles
            NotFound: Le fournisseur ne connait pas d'identifiant IMDb
            StoreWriteFailed: Ecriture de l'entree rejetee
        """
        external = await self._provider.fetch_external_ids(entry.id, entry.type)
        if not external.imdb_id:
            raise NotFound(f"Aucun identifiant IMDb pour l'entree {entry.id}")

        stored = self._entry_repo.upsert(replace(entry, imdb_id=external.imdb_id))
        logger.debug("Identifiant IMDb enregistre", entry_id=entry.id, imdb_id=external.imdb_id)
        return stored

    # ------------------------------------------------------------------
    # Episodes
    # ------------------------------------------------------------------

    def save_episode(
        self,
        entry_id: str,
        season_number: int,
        episode_number: int,
        fields: dict[str, Any],
        admin_edited: bool = True,
    ) -> EpisodeMetadata:
        """
        Ecrit un episode avec les valeurs fournies.

        Une sauvegarde operateur marque l'episode comme edite par l'admin
        (protection contre les synchronisations de saison).

        Raises:
            ValueError: Champ non modifiable dans fields
        """
        unknown = set(fields) - set(EPISODE_FIELDS)
        if unknown:
            raise ValueError(f"Champs non modifiables: {', '.join(sorted(unknown))}")

        existing = next(
            (
                e
                for e in self._episode_repo.list_episodes(entry_id, season_number)
                if e.episode_number == episode_number
            ),
            None,
        )
        episode = existing or EpisodeMetadata(
            entry_id=entry_id, season_number=season_number, episode_number=episode_number
        )
        for name, value in fields.items():
            setattr(episode, name, value)
        episode.admin_edited = admin_edited
        episode.updated_at = self._clock()

        stored = self._episode_repo.upsert_episode(episode)
        logger.info(
            "Episode sauvegarde",
            entry_id=entry_id,
            season=season_number,
            episode=episode_number,
            admin_edited=admin_edited,
        )
        return stored

    async def refresh_episode(
        self,
        entry_id: str,
        season_number: int,
        episode_number: int,
        session: Optional[DraftSession] = None,
    ) -> EpisodeMetadata:
        """
        Charge un episode depuis le fournisseur, drapeau admin retire.

        Rien n'est ecrit : l'episode est place dans la session d'edition et
        ne sera persiste que par save_episode.

        Raises:
            ProviderUnavailable: Saison indisponible
            NotFound: Episode absent de la saison
        """
        detail = await self._provider.fetch_season_details(entry_id, season_number)
        upstream = next((e for e in detail.episodes if e.episode_number == episode_number), None)
        if upstream is None:
            raise NotFound(
                f"Episode {episode_number} absent de la saison {season_number} de {entry_id}"
            )

        episode = self._episode_from_provider(entry_id, season_number, upstream)
        if session is not None:
            session.stage_episode(entry_id, EntryType.SERIES, episode)
        return episode

    def delete_episode(self, entry_id: str, season_number: int, episode_number: int) -> bool:
        deleted = self._episode_repo.delete_episode(entry_id, season_number, episode_number)
        logger.info(
            "Episode supprime",
            entry_id=entry_id,
            season=season_number,
            episode=episode_number,
            deleted=deleted,
        )
        return deleted

    def delete_season(self, entry_id: str, season_number: int) -> int:
        """Supprime les metadonnees de tous les episodes d'une saison."""
        count = self._episode_repo.delete_season(entry_id, season_number)
        logger.info("Saison supprimee", entry_id=entry_id, season=season_number, episodes=count)
        return count

    # ------------------------------------------------------------------
    # Liens
    # ------------------------------------------------------------------

    def save_movie_links(self, entry_id: str, watch_link: str, download_link: str) -> Entry:
        """
        Ecrit les liens d'un film (cree l'entree si elle n'existe pas).

        Raises:
            NotFound: L'entree existe mais n'est pas un film
        """
        entry_id = parse_catalog_id(entry_id)
        entry = self._entry_repo.get_by_id(entry_id) or Entry(id=entry_id, type=EntryType.MOVIE)
        if entry.type != EntryType.MOVIE:
            raise NotFound(f"L'entree {entry_id} n'est pas un film")

        entry.content = MovieContent(
            watch_link=(watch_link or "").strip(),
            download_link=(download_link or "").strip(),
        )
        entry.overrides |= FieldGroup.LINKS
        return self._entry_repo.upsert(entry)

    def save_season_links(
        self,
        entry_id: str,
        season_number: int,
        watch_links: list[str],
        download_links: list[str],
    ) -> Entry:
        """
        Ecrit les liens d'une saison (cree l'entree si elle n'existe pas).

        Les liens vides sont retires, les autres debarrasses de leurs espaces.

        Raises:
            NotFound: L'entree existe mais n'est pas une serie
        """
        entry_id = parse_catalog_id(entry_id)
        entry = self._entry_repo.get_by_id(entry_id) or Entry(
            id=entry_id, type=EntryType.SERIES, content={}
        )
        if entry.type != EntryType.SERIES:
            raise NotFound(f"L'entree {entry_id} n'est pas une serie")

        content = dict(entry.content)
        content[season_number] = SeasonLinks(
            watch_links=_clean_links(watch_links),
            download_links=_clean_links(download_links),
        )
        entry.content = content
        entry.overrides |= FieldGroup.LINKS
        return self._entry_repo.upsert(entry)

    def remove_season_links(self, entry_id: str, season_number: int) -> Entry:
        """
        Retire une saison du contenu d'une serie.

        L'entree est conservee meme sans saison : sa suppression passe par
        la corbeille.

        Raises:
            NotFound: Entree ou saison absente
        """
        entry = self._get_entry(entry_id)
        if not isinstance(entry.content, dict) or season_number not in entry.content:
            raise NotFound(f"Saison {season_number} absente de l'entree {entry_id}")

        content = dict(entry.content)
        del content[season_number]
        entry.content = content
        return self._entry_repo.upsert(entry)
