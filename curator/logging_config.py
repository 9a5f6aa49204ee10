"""
Configuration du logging de Curator via loguru.

Deux sorties :
- console (stderr) : coloree, avec le contexte du catalogue (entree, saison,
  unite de lot) affiche a la suite du message quand il est present ;
- fichier : JSON avec rotation, contenant tous les champs structures
  (entry_id, season, attempted, failed...) pour l'analyse des lots.
"""

import sys
from pathlib import Path

from loguru import logger

# Champs structures repris sur la ligne console, dans cet ordre
_CONSOLE_CONTEXT = ("entry_id", "season", "unit", "record_id", "kind")


def _console_format(record: dict) -> str:
    """Format console : message suivi du contexte catalogue s'il existe."""
    context = " ".join(
        f"{key}={record['extra'][key]}" for key in _CONSOLE_CONTEXT if key in record["extra"]
    )
    escaped = context.replace("{", "{{").replace("}", "}}").replace("<", r"\<")
    suffix = f" <dim>[{escaped}]</dim>" if context else ""
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
        "<level>{message}</level>" + suffix + "\n{exception}"
    )


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/curator.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """
    (Re)configure les handlers loguru.

    Appelee au demarrage puis a nouveau par les options -v / -q de la CLI :
    les handlers existants sont toujours retires avant d'ajouter les nouveaux.

    Args:
        log_level: Niveau minimum de la sortie console
        log_file: Fichier JSON (repertoire parent cree si besoin)
        rotation_size: Taille declenchant la rotation (ex: "10 MB")
        retention_count: Nombre de fichiers archives conserves
    """
    logger.remove()

    logger.add(sys.stderr, level=log_level, format=_console_format, colorize=True)

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,
    )

    logger.debug("Logging configure", log_level=log_level, log_file=str(log_file))
