"""
Adaptateurs API externes.

- TMDBClient : client du fournisseur de metadonnees (IMetadataProvider)
- with_retry / call_with_retry : relance sur RateLimited (tenacity)
"""

from curator.adapters.api.retry import call_with_retry, with_retry
from curator.adapters.api.tmdb_client import TMDBClient

__all__ = ["TMDBClient", "call_with_retry", "with_retry"]
