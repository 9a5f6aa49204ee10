"""
Groupes de champs proteges par l'administrateur.

Remplace le booleen unique admin_edited par un ensemble de groupes de champs :
un groupe marque comme edite par l'administrateur n'est jamais ecrase par
une ecriture automatique (backfill, synchronisation en masse).

Les episodes portent leur propre drapeau par ligne (EpisodeMetadata.admin_edited),
independant des groupes de l'entree parente.
"""

from enum import Enum, Flag, auto


class FieldGroup(Flag):
    """Groupes de champs d'une entree pouvant etre pris en charge par l'admin."""

    NONE = 0
    METADATA = auto()  # titre, visuels, resume, genres, casting, notes...
    LINKS = auto()  # liens de lecture / telechargement

    @classmethod
    def from_names(cls, names: list[str]) -> "FieldGroup":
        """Reconstruit un ensemble depuis une liste de noms persistee."""
        groups = cls.NONE
        for name in names:
            member = cls.__members__.get(name.upper())
            if member is not None:
                groups |= member
        return groups

    def to_names(self) -> list[str]:
        """Liste triee des noms des groupes actifs (pour la persistance JSON)."""
        return sorted(
            member.name.lower()
            for member in FieldGroup
            if member is not FieldGroup.NONE and member in self
        )


AUTOMATIC_GROUPS = FieldGroup.METADATA
"""Groupes qu'une ecriture automatique peut tenter de mettre a jour."""


def writable_groups(overrides: FieldGroup) -> FieldGroup:
    """
    Groupes qu'une ecriture automatique a le droit d'ecraser.

    Args:
        overrides: Groupes actuellement pris en charge par l'administrateur

    Returns:
        Groupes automatiques non proteges
    """
    return AUTOMATIC_GROUPS & ~overrides


class OverridePolicy(str, Enum):
    """
    Effet d'un rafraichissement explicite sur le drapeau METADATA.

    KEEP conserve l'etat du drapeau, CLEAR le retire : la prochaine
    sauvegarde rendra alors l'entree aux mises a jour automatiques.
    """

    KEEP = "keep"
    CLEAR = "clear"
