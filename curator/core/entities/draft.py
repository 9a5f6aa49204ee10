"""
Copie de travail d'une entrée en cours d'édition.

Un rafraîchissement explicite charge les valeurs du fournisseur dans une
copie de travail, sans rien écrire en base. L'opérateur peut ensuite la
retoucher puis la sauvegarder.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from curator.core.entities.entry import EntryType, EpisodeMetadata
from curator.core.value_objects.overrides import FieldGroup


@dataclass
class WorkingCopy:
    """
    Valeurs en attente de sauvegarde pour une entrée.

    Attributs :
        entry_id : Identifiant de l'entrée éditée
        type : Type de l'entrée
        fields : Valeurs des champs de présentation
        overrides : Groupes admin tels qu'ils seront sauvegardés
        staged_at : Date du chargement depuis le fournisseur
        episodes : Episodes rafraîchis individuellement, par (saison, épisode)
    """

    entry_id: str
    type: EntryType
    fields: dict[str, Any] = field(default_factory=dict)
    overrides: FieldGroup = FieldGroup.NONE
    staged_at: Optional[datetime] = None
    episodes: dict[tuple[int, int], EpisodeMetadata] = field(default_factory=dict)

    @property
    def admin_edited(self) -> bool:
        return FieldGroup.METADATA in self.overrides
