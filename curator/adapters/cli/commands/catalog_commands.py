"""
Commandes CLI du catalogue : resolution d'identifiant, synchronisation des
saisons, pre-remplissage en masse, identifiants IMDb et recherche.
"""

import asyncio
import signal
from typing import Annotated, Optional

import typer
from rich.table import Table

from curator.adapters.cli.helpers import console, suppress_loguru, sync_progress, with_container
from curator.core.entities.entry import EntryType
from curator.core.errors import CuratorError
from curator.core.ports.repositories import EntryFilters, SortOrder
from curator.services.batch_sync import BatchReport, CancellationToken, ProgressEvent


def _install_cancel_handler(token: CancellationToken) -> None:
    """Ctrl+C annule le lot proprement entre deux unites."""
    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError):
        # add_signal_handler n'existe pas sous Windows
        pass


def _print_report(report: BatchReport) -> None:
    console.print("\n[bold]Resume:[/bold]")
    console.print(f"  [green]{report.succeeded}[/green] reussie(s)")
    if report.failed > 0:
        console.print(f"  [red]{report.failed}[/red] echec(s)")
        for unit, error in report.failures:
            console.print(f"    [dim]{unit}: {error}[/dim]")
    if report.cancelled:
        console.print("  [yellow]Lot annule avant la fin[/yellow]")


def resolve(
    media_id: Annotated[str, typer.Argument(help="Identifiant TMDB (ex: 93405)")],
) -> None:
    """Determine si un identifiant TMDB designe un film ou une serie."""
    asyncio.run(_resolve_async(media_id))


@with_container(requires_db=False)
async def _resolve_async(container, media_id: str) -> None:
    """Implementation async de la commande resolve."""
    service = container.reconciliation_service()
    try:
        candidate = await service.resolve_candidate(media_id)
    except CuratorError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1)

    details = candidate.details
    year = f" ({details.release_year})" if details.release_year else ""
    console.print(f"[bold cyan]{details.title}[/bold cyan]{year} -> {candidate.preferred.value}")
    if candidate.series is not None:
        console.print(f"  Serie : {candidate.series.number_of_seasons or 0} saison(s)")
    if candidate.movie is not None:
        console.print(f"  Film : {candidate.movie.title}")


def sync_seasons(
    entry_id: Annotated[str, typer.Argument(help="Identifiant de la serie")],
    season: Annotated[
        Optional[list[int]],
        typer.Option("--season", "-s", help="Saison a synchroniser (repetable, defaut: toutes)"),
    ] = None,
) -> None:
    """Synchronise les episodes des saisons d'une serie depuis TMDB."""
    asyncio.run(_sync_seasons_async(entry_id, season))


@with_container()
async def _sync_seasons_async(container, entry_id: str, seasons: Optional[list[int]]) -> None:
    """Implementation async de la commande sync-seasons."""
    orchestrator = container.batch_sync_orchestrator()
    token = CancellationToken()
    _install_cancel_handler(token)

    console.print(f"[bold cyan]Synchronisation des saisons[/bold cyan]: {entry_id}\n")

    with suppress_loguru():
        with sync_progress() as progress:
            task = progress.add_task("[cyan]Saisons...", total=None)

            def on_progress(event: ProgressEvent) -> None:
                """Callback de progression."""
                progress.update(task, completed=event.current, total=event.total)
                mark = "[green]✓[/green]" if event.succeeded else "[red]✗[/red]"
                progress.console.print(f"  {mark} {event.message}")

            try:
                report = await orchestrator.sync_seasons(
                    entry_id, seasons=seasons, on_progress=on_progress, cancel=token
                )
            except CuratorError as e:
                console.print(f"[red]Synchronisation impossible:[/red] {e}")
                raise typer.Exit(code=1)

    _print_report(report)


def backfill(
    entry_type: Annotated[
        Optional[EntryType],
        typer.Option("--type", "-t", help="Restreindre a un type d'entree"),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Nombre maximum d'entrees a traiter"),
    ] = None,
    missing_only: Annotated[
        bool,
        typer.Option(
            "--missing-only",
            help="Completer uniquement les champs vides (affiches, note, langue, pays)",
        ),
    ] = False,
) -> None:
    """Pre-remplit les metadonnees des entrees depuis TMDB (champs admin proteges)."""
    asyncio.run(_backfill_async(entry_type, limit, missing_only))


async def _run_entry_batch(entries, run, title: str, label: str) -> None:
    """Affiche la progression d'un lot d'entrees puis son resume."""
    if not entries:
        console.print("[yellow]Aucune entree a traiter.[/yellow]")
        return

    token = CancellationToken()
    _install_cancel_handler(token)
    console.print(f"[bold cyan]{title}[/bold cyan]: {len(entries)} entree(s)\n")

    with suppress_loguru():
        with sync_progress() as progress:
            task = progress.add_task(f"[cyan]{label}...", total=len(entries))

            def on_progress(event: ProgressEvent) -> None:
                """Callback de progression."""
                progress.update(task, completed=event.current)
                if not event.succeeded:
                    progress.console.print(f"  [red]✗[/red] {event.message}")

            report = await run(entries=entries, on_progress=on_progress, cancel=token)

    _print_report(report)


@with_container()
async def _backfill_async(
    container, entry_type: Optional[EntryType], limit: Optional[int], missing_only: bool = False
) -> None:
    """Implementation async de la commande backfill."""
    orchestrator = container.batch_sync_orchestrator()
    keep = orchestrator.needs_filling if missing_only else None
    try:
        entries = orchestrator.select_entries(entry_type=entry_type, limit=limit, keep=keep)
    except CuratorError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1)

    async def run(**kwargs) -> BatchReport:
        return await orchestrator.backfill_entries(missing_only=missing_only, **kwargs)

    title = "Completion des champs manquants" if missing_only else "Pre-remplissage TMDB"
    await _run_entry_batch(entries, run, title, "Pre-remplissage")


def sync_imdb_ids(
    entry_type: Annotated[
        Optional[EntryType],
        typer.Option("--type", "-t", help="Restreindre a un type d'entree"),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Nombre maximum d'entrees a traiter"),
    ] = None,
) -> None:
    """Renseigne l'identifiant IMDb des entrees qui n'en ont pas."""
    asyncio.run(_sync_imdb_ids_async(entry_type, limit))


@with_container()
async def _sync_imdb_ids_async(
    container, entry_type: Optional[EntryType], limit: Optional[int]
) -> None:
    """Implementation async de la commande sync-imdb-ids."""
    orchestrator = container.batch_sync_orchestrator()
    try:
        entries = orchestrator.select_entries(
            entry_type=entry_type, limit=limit, keep=lambda e: not e.imdb_id
        )
    except CuratorError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1)

    await _run_entry_batch(
        entries, orchestrator.sync_external_ids, "Identifiants IMDb", "Identifiants"
    )


def search(
    query: Annotated[str, typer.Argument(help="Titre ou identifiant")] = "",
    entry_type: Annotated[
        Optional[EntryType],
        typer.Option("--type", "-t", help="Restreindre a un type d'entree"),
    ] = None,
    missing: Annotated[
        Optional[list[str]],
        typer.Option("--missing", "-m", help="Champ manquant: poster, backdrop, logo, overview"),
    ] = None,
    edited: Annotated[
        Optional[str],
        typer.Option("--edited", help="Edite recemment: 24h, 7d ou 30d"),
    ] = None,
    sort: Annotated[SortOrder, typer.Option("--sort", help="Ordre de tri")] = SortOrder.NONE,
    provider: Annotated[
        bool,
        typer.Option("--provider", "-p", help="Inclure les resultats TMDB"),
    ] = False,
) -> None:
    """Recherche dans le catalogue (et optionnellement chez TMDB)."""
    asyncio.run(_search_async(query, entry_type, missing or [], edited, sort, provider))


@with_container()
async def _search_async(
    container,
    query: str,
    entry_type: Optional[EntryType],
    missing: list[str],
    edited: Optional[str],
    sort: SortOrder,
    provider: bool,
) -> None:
    """Implementation async de la commande search."""
    service = container.search_service()
    config = container.config()

    unknown = set(missing) - {"poster", "backdrop", "logo", "overview"}
    if unknown:
        console.print(f"[red]Champ inconnu:[/red] {', '.join(sorted(unknown))}")
        raise typer.Exit(code=1)

    filters = EntryFilters(
        entry_type=entry_type,
        missing_poster="poster" in missing,
        missing_backdrop="backdrop" in missing,
        missing_logo="logo" in missing,
        missing_overview="overview" in missing,
        sort_by=sort,
        limit=config.search_limit,
    )
    try:
        entries = service.search_store(query, filters, edited_within=edited)
        hits = await service.search_provider(query) if provider and query else []
    except (CuratorError, ValueError) as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1)

    candidates = service.merge_candidates(entries, hits)
    if not candidates:
        console.print("[yellow]Aucun resultat.[/yellow]")
        return

    table = Table(title=f"Resultats ({len(candidates)})")
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Titre")
    table.add_column("Annee", justify="right")
    table.add_column("En base", justify="center")
    table.add_column("Liens", justify="center")
    for c in candidates:
        table.add_row(
            c.id,
            c.type.value,
            c.title,
            str(c.year or ""),
            "✓" if c.in_store else "",
            "✓" if c.has_links else "",
        )
    console.print(table)
