"""Interface en ligne de commande de Curator (typer + rich)."""
