"""
Curator - Noyau d'administration d'un catalogue films/series.

Ce package reconcilie les metadonnees editees par les administrateurs avec
celles du fournisseur externe (TMDB), et protege les suppressions via une
corbeille locale persistante.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, erreurs)
- services/ : Couche application (réconciliation, synchronisation, corbeille)
- adapters/ : Couche infrastructure (CLI, client API, cache disque)
- infrastructure/ : Persistance SQLModel
"""

__version__ = "0.1.0"
