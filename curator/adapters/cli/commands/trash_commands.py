"""
Commandes CLI de la corbeille.

Sous-commandes :
- list : affiche les instantanes (les plus recents en premier)
- delete : met des entrees (ou demandes) a la corbeille
- restore : restaure des instantanes en base
- purge : supprime definitivement des instantanes
- empty : vide la corbeille
"""

from typing import Annotated

import typer
from rich.table import Table

from curator.adapters.cli.helpers import console, with_container_sync
from curator.core.errors import CuratorError, NotFound
from curator.services.trash import BulkReport, TrashLifecycleManager

trash_app = typer.Typer(
    name="trash",
    help="Corbeille : suppression douce, restauration et purge",
    rich_markup_mode="rich",
)

RequestsOption = Annotated[
    bool,
    typer.Option("--requests", "-r", help="Agir sur la corbeille des demandes"),
]


def _manager(container, requests: bool) -> TrashLifecycleManager:
    return container.request_trash() if requests else container.entry_trash()


def _print_bulk(report: BulkReport, verb: str) -> None:
    for record_id in report.succeeded:
        console.print(f"  [green]✓[/green] {record_id} {verb}")
    for record_id in report.not_found:
        console.print(f"  [yellow]-[/yellow] {record_id} absent de la corbeille")
    for record_id, error in report.failed:
        console.print(f"  [red]✗[/red] {record_id}: {error}")
    if report.failed:
        raise typer.Exit(code=1)


@trash_app.command("list")
def list_trash(requests: RequestsOption = False) -> None:
    """Liste le contenu de la corbeille."""
    with with_container_sync() as container:
        snapshots = _manager(container, requests).list()

    if not snapshots:
        console.print("[dim]La corbeille est vide.[/dim]")
        return

    table = Table(title=f"Corbeille ({len(snapshots)})")
    table.add_column("ID", style="cyan")
    table.add_column("Titre")
    table.add_column("Type")
    table.add_column("Origine")
    table.add_column("Supprime le")
    for snapshot in snapshots:
        table.add_row(
            snapshot.id,
            snapshot.title,
            snapshot.type or "",
            snapshot.origin_category or "",
            snapshot.deleted_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@trash_app.command("delete")
def delete(
    record_ids: Annotated[list[str], typer.Argument(help="Identifiants a mettre a la corbeille")],
    requests: RequestsOption = False,
) -> None:
    """Met des enregistrements a la corbeille (restaurables)."""
    report = BulkReport()
    with with_container_sync() as container:
        manager = _manager(container, requests)
        for record_id in record_ids:
            try:
                manager.trash_by_id(record_id)
            except NotFound:
                console.print(f"  [yellow]-[/yellow] {record_id} introuvable en base")
                continue
            except CuratorError as e:
                report.failed.append((record_id, str(e)))
                continue
            report.succeeded.append(record_id)
    _print_bulk(report, "mis a la corbeille")


@trash_app.command("restore")
def restore(
    record_ids: Annotated[list[str], typer.Argument(help="Identifiants a restaurer")],
    requests: RequestsOption = False,
) -> None:
    """Restaure des enregistrements depuis la corbeille."""
    with with_container_sync() as container:
        report = _manager(container, requests).restore_many(record_ids)
    _print_bulk(report, "restaure")


@trash_app.command("purge")
def purge(
    record_ids: Annotated[list[str], typer.Argument(help="Identifiants a purger")],
    requests: RequestsOption = False,
) -> None:
    """Supprime definitivement des instantanes de la corbeille."""
    with with_container_sync() as container:
        report = _manager(container, requests).permanently_delete_many(record_ids)
    _print_bulk(report, "purge")


@trash_app.command("empty")
def empty(
    requests: RequestsOption = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Ne pas demander de confirmation")] = False,
) -> None:
    """Vide la corbeille (irreversible)."""
    if not yes and not typer.confirm("Vider definitivement la corbeille ?"):
        raise typer.Abort()
    with with_container_sync() as container:
        count = _manager(container, requests).empty_trash()
    console.print(f"[green]{count}[/green] instantane(s) purge(s)")
