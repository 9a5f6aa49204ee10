"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- FieldGroup : Groupes de champs pris en charge par l'administrateur
- OverridePolicy : Effet d'un rafraichissement explicite sur le drapeau admin
- writable_groups : Groupes qu'une ecriture automatique peut ecraser
- parse_catalog_id : Validation/normalisation d'un identifiant fournisseur
"""

from curator.core.value_objects.identifiers import is_catalog_id, parse_catalog_id
from curator.core.value_objects.overrides import (
    AUTOMATIC_GROUPS,
    FieldGroup,
    OverridePolicy,
    writable_groups,
)

__all__ = [
    "AUTOMATIC_GROUPS",
    "FieldGroup",
    "OverridePolicy",
    "writable_groups",
    "parse_catalog_id",
    "is_catalog_id",
]
