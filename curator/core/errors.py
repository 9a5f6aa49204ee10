"""
Taxonomie des erreurs du domaine.

Toutes les erreurs heritent de CuratorError et sont recuperables : aucune
n'est fatale au processus, une nouvelle tentative de la meme operation
peut reussir.

- ProviderUnavailable : echec d'un appel au fournisseur (reseau, 4xx, 5xx)
- RateLimited : cas particulier de ProviderUnavailable pour les reponses 429
- NotFound : identifiant introuvable (fournisseur, base ou corbeille)
- StoreWriteFailed : la couche de persistance a rejete une ecriture
- StoreUnavailable : la base ne repond pas (lecture impossible)
- InvalidIdentifier : identifiant non numerique ou mal forme
- PartialFailure : unite de lot traitee en partie seulement
"""

from typing import Optional, Sequence


class CuratorError(Exception):
    """Erreur de base du noyau Curator."""


class ProviderUnavailable(CuratorError):
    """
    Le fournisseur de metadonnees n'a pas pu repondre.

    Attributes:
        status_code: Code HTTP de la reponse, ou None pour une erreur reseau
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        """True si le fournisseur a repondu 404."""
        return self.status_code == 404


class RateLimited(ProviderUnavailable):
    """
    Le fournisseur a repondu 429 Too Many Requests.

    Attributes:
        retry_after: Secondes a attendre (header Retry-After), ou None
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s", status_code=429)


class NotFound(CuratorError):
    """L'element demande n'existe pas (base, corbeille ou fournisseur)."""


class StoreWriteFailed(CuratorError):
    """
    La persistance a rejete une ecriture.

    Attributes:
        written: Cles des lignes effectivement ecrites avant l'echec
    """

    def __init__(self, message: str, written: Sequence[object] = ()) -> None:
        self.written = tuple(written)
        super().__init__(message)


class StoreUnavailable(CuratorError):
    """La base de donnees est injoignable."""


class InvalidIdentifier(CuratorError):
    """Identifiant non numerique ou mal forme, rejete avant tout appel reseau."""


class PartialFailure(CuratorError):
    """Une unite de lot n'a ete traitee qu'en partie (ex: saisons en echec)."""
