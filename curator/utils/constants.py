"""
Constantes globales pour Curator.

Ce module contient les constantes partagees par les adaptateurs et services :
- URL de base et tailles des images TMDB
- Limites d'affichage (casting, recherche)
- Fenetres de filtre "recemment edite"
- Cadence par defaut de la synchronisation en masse
"""

from datetime import timedelta

# API TMDB v3
TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"

# Tailles d'images utilisees par le catalogue
POSTER_SIZE = "w342"
BACKDROP_SIZE = "original"
LOGO_SIZE = "w500"
STILL_SIZE = "w300"
PROFILE_SIZE = "w185"

# Langues des images demandees (anglais puis sans texte)
IMAGE_LANGUAGES = "en,null"

# Nombre maximum de resultats de la recherche fournisseur
PROVIDER_SEARCH_LIMIT = 20

# Nombre maximum de resultats de la recherche en base
STORE_SEARCH_LIMIT = 50

# Delai entre deux unites d'un lot (secondes)
DEFAULT_SYNC_PACING_SECONDS = 0.3

# Delai entre deux appels aux identifiants externes (secondes)
DEFAULT_EXTERNAL_IDS_PACING_SECONDS = 0.25

# Fenetres du filtre "recemment edite"
RECENTLY_EDITED_WINDOWS = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def image_url(path: str | None, size: str) -> str | None:
    """
    Construit l'URL complete d'une image TMDB.

    Args:
        path: Chemin relatif retourne par l'API (ex: "/abc.jpg"), ou None
        size: Taille TMDB (ex: "w342", "original")

    Returns:
        URL complete, ou None si aucun chemin
    """
    if not path:
        return None
    return f"{TMDB_IMAGE_BASE_URL}/{size}{path}"
