"""
Validation des identifiants catalogue.

Les identifiants du fournisseur sont numeriques ; ils sont stockes en base
sous forme de chaine. Toute valeur mal formee est rejetee avant le moindre
appel reseau.
"""

import re

from curator.core.errors import InvalidIdentifier

_NUMERIC_ID = re.compile(r"^\d+$")


def parse_catalog_id(raw: object) -> str:
    """
    Normalise un identifiant fournisseur en chaine.

    Args:
        raw: Identifiant brut (int ou chaine, espaces toleres)

    Returns:
        L'identifiant sous forme de chaine numerique sans zeros inutiles

    Raises:
        InvalidIdentifier: Si la valeur n'est pas un entier positif
    """
    if isinstance(raw, bool):
        raise InvalidIdentifier(f"Identifiant invalide: {raw!r}")
    if isinstance(raw, int):
        if raw <= 0:
            raise InvalidIdentifier(f"Identifiant invalide: {raw!r}")
        return str(raw)

    text = str(raw).strip() if raw is not None else ""
    if not _NUMERIC_ID.match(text) or int(text) == 0:
        raise InvalidIdentifier(f"Identifiant invalide: {raw!r}")
    return str(int(text))


def is_catalog_id(raw: object) -> bool:
    """True si la valeur est un identifiant fournisseur valide."""
    try:
        parse_catalog_id(raw)
    except InvalidIdentifier:
        return False
    return True
