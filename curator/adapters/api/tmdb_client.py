"""
Client TMDB pour la recuperation des metadonnees films et series.

Implemente l'interface IMetadataProvider pour TMDB (The Movie Database).
Chaque appel est unique : pas de cache de reponses (un rafraichissement doit
toujours refleter l'etat courant du fournisseur) et pas de retry interne
(une reponse 429 est convertie en RateLimited, la relance releve de
l'appelant).

Usage:
    client = TMDBClient(api_key="your_key")
    details = await client.fetch_details("1399", EntryType.SERIES)
    season = await client.fetch_season_details("1399", 1)
    await client.close()
"""

from datetime import date
from typing import Any, Optional

import httpx
from loguru import logger

from curator.core.entities.entry import CastMember, EntryType, Genre
from curator.core.errors import ProviderUnavailable, RateLimited
from curator.core.ports.provider import (
    ExternalIds,
    IMetadataProvider,
    ImageRef,
    ProviderDetails,
    ProviderEpisode,
    ProviderImages,
    SearchHit,
    SeasonDetail,
    SeasonSummary,
)
from curator.core.value_objects.identifiers import parse_catalog_id
from curator.utils.constants import (
    BACKDROP_SIZE,
    IMAGE_LANGUAGES,
    LOGO_SIZE,
    POSTER_SIZE,
    PROVIDER_SEARCH_LIMIT,
    STILL_SIZE,
    TMDB_BASE_URL,
    image_url,
)

# Segment d'URL TMDB par type d'entree
_MEDIA_PATHS = {
    EntryType.MOVIE: "movie",
    EntryType.SERIES: "tv",
}


def _parse_date(value: Optional[str]) -> Optional[date]:
    """Convertit une date ISO (YYYY-MM-DD) ; vide ou invalide -> None."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class TMDBClient(IMetadataProvider):
    """
    Client API TMDB pour les metadonnees du catalogue.

    Implemente IMetadataProvider avec:
    - Details d'un film ou d'une serie (avec liste des saisons)
    - Images (logos, affiches, fonds) en anglais ou sans texte
    - Casting, details de saison, identifiants externes
    - Recherche multi-types pour la vue d'index

    Toute erreur reseau ou HTTP leve ProviderUnavailable (RateLimited pour 429).

    Example:
        client = TMDBClient(api_key="xxx")
        hits = await client.search_multi("Breaking Bad")
        await client.close()
    """

    def __init__(
        self,
        api_key: Optional[str],
        language: str = "en-US",
        timeout: float = 30.0,
    ) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API v3 ou Read Access Token v4 (None = non configure)
            language: Langue des metadonnees textuelles
            timeout: Timeout des requetes HTTP en secondes
        """
        self._api_key = api_key
        self._language = language
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer

        Raises:
            ProviderUnavailable: Si aucune cle n'est configuree
        """
        if not self._api_key:
            raise ProviderUnavailable("Cle API TMDB non configuree")

        if self._client is None or self._client.is_closed:
            # Detecter le type de cle : v3 (32 hex) vs v4 (long JWT)
            is_v4_token = len(self._api_key) > 40

            headers = {"Accept": "application/json"}
            params = {}

            if is_v4_token:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=self._timeout,
            )
        return self._client

    @property
    def source(self) -> str:
        """Retourne l'identifiant de la source API."""
        return "tmdb"

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Execute une requete GET unique et retourne le JSON.

        Raises:
            RateLimited: Reponse 429 (Retry-After transmis si present)
            ProviderUnavailable: Erreur reseau, 4xx ou 5xx
        """
        client = self._get_client()
        try:
            response = await client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning("Erreur reseau TMDB", path=path, error=str(e))
            raise ProviderUnavailable(f"Erreur reseau TMDB sur {path}: {e}") from e

        if response.status_code == 429:
            retry_after_header = response.headers.get("Retry-After")
            retry_after = int(retry_after_header) if retry_after_header and retry_after_header.isdigit() else None
            raise RateLimited(retry_after)

        if response.status_code >= 400:
            raise ProviderUnavailable(
                f"TMDB a repondu {response.status_code} sur {path}",
                status_code=response.status_code,
            )

        return response.json()

    async def fetch_details(self, media_id: str, media_type: EntryType) -> ProviderDetails:
        """
        Recupere les details d'un film ou d'une serie.

        Args:
            media_id: ID TMDB
            media_type: Type de l'entree (determine l'endpoint /movie ou /tv)

        Returns:
            ProviderDetails avec URL d'images completes
        """
        media_id = parse_catalog_id(media_id)
        data = await self._get(
            f"/{_MEDIA_PATHS[media_type]}/{media_id}",
            params={"language": self._language},
        )

        if media_type == EntryType.SERIES:
            title = data.get("name") or data.get("original_name")
            release_date = data.get("first_air_date")
            origin_country = data.get("origin_country") or []
        else:
            title = data.get("title") or data.get("original_title")
            release_date = data.get("release_date")
            # Les films n'exposent pas toujours origin_country : fallback sur les pays de production
            origin_country = data.get("origin_country") or [
                c.get("iso_3166_1") for c in data.get("production_countries", []) if c.get("iso_3166_1")
            ]

        genres = tuple(
            Genre(id=g["id"], name=g.get("name", ""))
            for g in data.get("genres", [])
            if "id" in g
        )
        seasons = tuple(
            SeasonSummary(
                season_number=s["season_number"],
                episode_count=s.get("episode_count") or 0,
                name=s.get("name"),
            )
            for s in data.get("seasons", [])
            if s.get("season_number") is not None
        )

        return ProviderDetails(
            id=str(data.get("id", media_id)),
            type=media_type,
            title=title,
            overview=data.get("overview") or None,
            tagline=data.get("tagline") or None,
            status=data.get("status"),
            poster_url=image_url(data.get("poster_path"), POSTER_SIZE),
            backdrop_url=image_url(data.get("backdrop_path"), BACKDROP_SIZE),
            vote_average=data.get("vote_average"),
            vote_count=data.get("vote_count"),
            runtime=data.get("runtime") if media_type == EntryType.MOVIE else None,
            number_of_seasons=data.get("number_of_seasons"),
            number_of_episodes=data.get("number_of_episodes"),
            release_date=release_date or None,
            original_language=data.get("original_language"),
            origin_country=tuple(origin_country),
            genres=genres,
            seasons=seasons,
        )

    async def fetch_images(self, media_id: str, media_type: EntryType) -> ProviderImages:
        """Recupere logos, affiches et fonds d'ecran (anglais ou sans texte)."""
        media_id = parse_catalog_id(media_id)
        data = await self._get(
            f"/{_MEDIA_PATHS[media_type]}/{media_id}/images",
            params={"include_image_language": IMAGE_LANGUAGES},
        )

        def _refs(key: str, size: str) -> tuple[ImageRef, ...]:
            return tuple(
                ImageRef(url=image_url(img["file_path"], size), iso_639_1=img.get("iso_639_1"))
                for img in data.get(key, [])
                if img.get("file_path")
            )

        return ProviderImages(
            logos=_refs("logos", LOGO_SIZE),
            posters=_refs("posters", POSTER_SIZE),
            backdrops=_refs("backdrops", BACKDROP_SIZE),
        )

    async def fetch_credits(self, media_id: str, media_type: EntryType) -> tuple[CastMember, ...]:
        """Recupere le casting dans l'ordre du fournisseur (chemins de profil bruts)."""
        media_id = parse_catalog_id(media_id)
        data = await self._get(
            f"/{_MEDIA_PATHS[media_type]}/{media_id}/credits",
            params={"language": self._language},
        )
        return tuple(
            CastMember(
                id=actor["id"],
                name=actor.get("name", ""),
                character=actor.get("character") or None,
                profile_path=actor.get("profile_path"),
            )
            for actor in data.get("cast", [])
            if "id" in actor
        )

    async def fetch_season_details(self, media_id: str, season_number: int) -> SeasonDetail:
        """
        Recupere les episodes d'une saison.

        Args:
            media_id: ID TMDB de la serie
            season_number: Numero de saison (0 = episodes speciaux)
        """
        media_id = parse_catalog_id(media_id)
        data = await self._get(
            f"/tv/{media_id}/season/{season_number}",
            params={"language": self._language},
        )
        episodes = tuple(
            ProviderEpisode(
                episode_number=ep["episode_number"],
                name=ep.get("name") or None,
                overview=ep.get("overview") or None,
                still_url=image_url(ep.get("still_path"), STILL_SIZE),
                air_date=_parse_date(ep.get("air_date")),
                runtime=ep.get("runtime"),
                vote_average=ep.get("vote_average"),
            )
            for ep in data.get("episodes", [])
            if ep.get("episode_number") is not None
        )
        return SeasonDetail(
            season_number=data.get("season_number", season_number),
            name=data.get("name"),
            episodes=episodes,
        )

    async def fetch_external_ids(self, media_id: str, media_type: EntryType) -> ExternalIds:
        """Recupere les identifiants IMDb, TVDB et Wikidata."""
        media_id = parse_catalog_id(media_id)
        data = await self._get(f"/{_MEDIA_PATHS[media_type]}/{media_id}/external_ids")
        return ExternalIds(
            imdb_id=data.get("imdb_id") or None,
            tvdb_id=data.get("tvdb_id"),
            wikidata_id=data.get("wikidata_id") or None,
        )

    async def search_multi(self, query: str) -> list[SearchHit]:
        """
        Recherche films et series par titre.

        Les personnes sont ignorees ; au plus 20 resultats sont retournes.
        """
        query = query.strip()
        if not query:
            return []

        data = await self._get(
            "/search/multi",
            params={"query": query, "language": self._language, "include_adult": "false"},
        )

        hits: list[SearchHit] = []
        for item in data.get("results", []):
            media_type = item.get("media_type")
            if media_type == "movie":
                entry_type = EntryType.MOVIE
                title = item.get("title") or item.get("original_title") or ""
                release_date = item.get("release_date")
            elif media_type == "tv":
                entry_type = EntryType.SERIES
                title = item.get("name") or item.get("original_name") or ""
                release_date = item.get("first_air_date")
            else:
                continue

            hits.append(
                SearchHit(
                    id=str(item["id"]),
                    type=entry_type,
                    title=title,
                    poster_url=image_url(item.get("poster_path"), POSTER_SIZE),
                    release_date=release_date or None,
                )
            )
            if len(hits) >= PROVIDER_SEARCH_LIMIT:
                break

        return hits

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
