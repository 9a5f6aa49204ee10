"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe CURATOR_,
et peut optionnellement être fournie via un fichier .env.

La clé API TMDB est optionnelle : sans elle, les opérations fournisseur
échouent avec ProviderUnavailable mais la corbeille et la base restent utilisables.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from curator.utils.constants import (
    DEFAULT_EXTERNAL_IDS_PACING_SECONDS,
    DEFAULT_SYNC_PACING_SECONDS,
)

# Trouver le fichier .env à la racine du projet (parent de curator/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe CURATOR_.
    Exemple : CURATOR_SYNC_PACING_SECONDS=0.5

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="CURATOR_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Base de données principale
    database_url: str = Field(default="sqlite:///curator.db")

    # Fournisseur (OPTIONNEL - v3 api key ou v4 read access token)
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_language: str = Field(default="en-US")
    tmdb_timeout_seconds: float = Field(default=30.0, gt=0)

    # Corbeille locale (indépendante de la base)
    trash_dir: Path = Field(default=Path("~/.curator/trash"))

    # Synchronisation en masse
    sync_pacing_seconds: float = Field(default=DEFAULT_SYNC_PACING_SECONDS, ge=0)
    external_ids_pacing_seconds: float = Field(default=DEFAULT_EXTERNAL_IDS_PACING_SECONDS, ge=0)
    rate_limit_retries: int = Field(default=3, ge=1)
    rate_limit_max_wait: int = Field(default=30, ge=1)

    # Edition
    draft_ttl_seconds: int = Field(default=1800, ge=1)
    cast_limit: int = Field(default=12, ge=1, le=12)
    search_limit: int = Field(default=50, ge=1)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/curator.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("trash_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return bool(self.tmdb_api_key)

    @property
    def entries_trash_dir(self) -> Path:
        return self.trash_dir / "entries"

    @property
    def requests_trash_dir(self) -> Path:
        return self.trash_dir / "requests"
