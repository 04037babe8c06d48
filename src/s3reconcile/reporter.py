"""Reporter — export CSV et rapports de statistiques."""

import csv
import json
from dataclasses import asdict
from io import StringIO

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from s3reconcile.models import (
    CATEGORIES,
    DEFAULT_RULESET,
    DOCUMENTS,
    IMAGES,
    OTHER,
    PATH_ROLES,
    SNAPSHOT,
    THUMBNAIL,
    VIDEOS,
    CategoryStats,
    ExportRow,
    Ruleset,
    StorageStats,
)
from s3reconcile.utils import human_size

CSV_HEADER = [
    "S3_Key",
    "File_Name",
    "File_Extension",
    "Media_Type",
    "Path_Type",
    "Size_Bytes",
    "Size_Human_Readable",
    "Last_Modified",
    "Storage_Class",
    "ETag",
]

_TITLES = {
    IMAGES: "Images",
    VIDEOS: "Vidéos",
    DOCUMENTS: "Documents",
    OTHER: "Autres",
}


def to_csv(rows: list[ExportRow]) -> str:
    """Sérialise les lignes d'export en CSV (en-tête seul si vide)."""
    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in rows:
        writer.writerow([
            r.key,
            r.filename,
            r.extension,
            r.category,
            r.role,
            r.size,
            r.size_human,
            r.last_modified,
            r.storage_class,
            r.etag,
        ])
    return output.getvalue()


def stats_to_json(stats: StorageStats) -> str:
    """Sérialise l'arbre de statistiques en JSON."""
    data = {
        "total": asdict(stats.total),
        "exclude_document_snapshots": stats.exclude_document_snapshots,
        "categories": {},
    }
    for name, cat in stats.categories.items():
        entry = {
            "count": cat.count,
            "size": cat.size,
            "by_extension": {
                ext: asdict(c) for ext, c in cat.by_extension.items()
            },
        }
        if cat.by_path is not None:
            entry["by_path"] = {
                role: asdict(c) for role, c in cat.by_path.items()
            }
        data["categories"][name] = entry
    return json.dumps(data, indent=2, ensure_ascii=False)


def _percent(part: int, whole: int) -> str:
    if not whole:
        return "0.00%"
    return f"{part / whole * 100:.2f}%"


def stats_to_table(
    stats: StorageStats,
    bucket: str = "",
    prefix: str = "",
    ruleset: Ruleset = DEFAULT_RULESET,
) -> str:
    """Rapport formaté pour le terminal avec rich."""
    console = Console(
        file=StringIO(), force_terminal=True, width=100, highlight=False,
    )

    def size(n: int) -> str:
        return human_size(n, ruleset.size_units)

    header = f"[bold]Bucket :[/bold] {escape(bucket)}" if bucket else ""
    if prefix:
        header += f" | [bold]Préfixe :[/bold] {escape(prefix)}"
    summary = (
        f"[bold]Fichiers     :[/bold] {stats.total.count:,}\n"
        f"[bold]Taille totale:[/bold] {size(stats.total.size)}"
        f" ({stats.total.size:,} octets)"
    )
    if header:
        summary = f"{header}\n{summary}"
    console.print(Panel(summary, title="Résumé", border_style="blue"))

    for name in CATEGORIES:
        cat = stats.categories[name]
        # Les autres fichiers n'apparaissent que s'il y en a
        if name == OTHER and not cat.count:
            continue
        _print_category(console, stats, name, cat, size)

    missing = stats.categories[OTHER].by_extension.get("")
    if missing and missing.count:
        console.print(
            f"[yellow]Attention :[/yellow] {missing.count} fichiers"
            " sans extension."
        )

    table = Table(title="Résumé par type")
    table.add_column("Type")
    table.add_column("Taille", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Fichiers", justify="right")
    for name in CATEGORIES:
        cat = stats.categories[name]
        if name == OTHER and not cat.count:
            continue
        table.add_row(
            _TITLES[name],
            size(cat.size),
            _percent(cat.size, stats.total.size),
            f"{cat.count:,}",
        )
    table.add_row(
        "[bold]TOTAL[/bold]",
        size(stats.total.size),
        "100.00%" if stats.total.size else "0.00%",
        f"{stats.total.count:,}",
    )
    console.print(table)

    return console.file.getvalue()


def _print_category(console, stats, name, cat: CategoryStats, size) -> None:
    """Section d'une catégorie : totaux, rôles de chemin, extensions."""
    title = _TITLES[name]
    note = ""
    if name == DOCUMENTS and stats.exclude_document_snapshots:
        note = " (snapshots exclus)"
    console.print(
        f"\n[bold]{title}[/bold] : {cat.count:,} fichiers{note}, "
        f"{size(cat.size)}, {_percent(cat.size, stats.total.size)}"
    )

    if cat.by_path is not None:
        table = Table(title=f"{title} par chemin")
        table.add_column("Rôle")
        table.add_column("Fichiers", justify="right")
        table.add_column("Taille", justify="right")
        for role in PATH_ROLES:
            counter = cat.by_path[role]
            label = role
            excluded = name == DOCUMENTS and (
                role == THUMBNAIL
                or (role == SNAPSHOT and stats.exclude_document_snapshots)
            )
            if excluded:
                label += " (exclus du total)"
            table.add_row(label, f"{counter.count:,}", size(counter.size))
        console.print(table)

    if cat.by_extension:
        table = Table(title=f"{title} par extension")
        table.add_column("Extension")
        table.add_column("Fichiers", justify="right")
        table.add_column("Taille", justify="right")
        table.add_column("%", justify="right")
        ranked = sorted(
            cat.by_extension.items(),
            key=lambda item: item[1].size,
            reverse=True,
        )
        for ext, counter in ranked:
            table.add_row(
                f".{ext}" if ext else "(aucune)",
                f"{counter.count:,}",
                size(counter.size),
                _percent(counter.size, cat.size),
            )
        console.print(table)
