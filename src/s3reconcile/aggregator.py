"""Agrégation — parcours unique du listing et construction des sorties."""

from collections.abc import Callable, Iterable, Iterator
from datetime import datetime, timezone

from s3reconcile.classifier import classify, classify_path_role
from s3reconcile.identity import extract_extension, extract_filename
from s3reconcile.models import (
    DEFAULT_RULESET,
    DOCUMENTS,
    SNAPSHOT,
    THUMBNAIL,
    Counter,
    Decision,
    ExportRow,
    Ruleset,
    StorageStats,
    StoredObject,
)
from s3reconcile.policy import (
    DOCUMENT_SNAPSHOT,
    DOCUMENT_THUMBNAIL,
    THUMBNAIL_SCOPE,
    evaluate,
)
from s3reconcile.utils import human_size

DecisionHook = Callable[[Decision], None]


def reconcile(
    objects: Iterable[StoredObject],
    reference_set: frozenset[str] | None,
    exclude_document_snapshots: bool = False,
    ruleset: Ruleset = DEFAULT_RULESET,
    on_decision: DecisionHook | None = None,
) -> Iterator[tuple[StoredObject, Decision]]:
    """Classifie puis évalue chaque objet du listing.

    Un index de références vide ne peut rien retenir : le listing
    n'est alors jamais parcouru. on_decision reçoit chaque décision
    (diagnostic).
    """
    if reference_set is not None and not reference_set:
        return

    for obj in objects:
        extension = extract_extension(obj.key)
        category = classify(obj.key, extension, ruleset)
        role = classify_path_role(obj.key)
        decision = evaluate(
            obj, category, role, reference_set,
            exclude_document_snapshots=exclude_document_snapshots,
            ruleset=ruleset,
        )
        if on_decision is not None:
            on_decision(decision)
        yield obj, decision


def format_timestamp(value: datetime | None) -> str:
    """Horodatage UTC à la seconde ("YYYY-MM-DD HH:MM:SS")."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d %H:%M:%S")


def to_export_row(
    obj: StoredObject,
    decision: Decision,
    ruleset: Ruleset = DEFAULT_RULESET,
) -> ExportRow:
    """Construit la ligne d'export d'un objet retenu."""
    return ExportRow(
        key=obj.key,
        filename=extract_filename(obj.key),
        extension=decision.extension,
        category=decision.category,
        role=decision.role,
        size=obj.size,
        size_human=human_size(obj.size, ruleset.size_units),
        last_modified=format_timestamp(obj.last_modified),
        storage_class=obj.storage_class or "STANDARD",
        etag=obj.etag.replace('"', "") if obj.etag else "",
    )


def build_export_rows(
    objects: Iterable[StoredObject],
    reference_set: frozenset[str] | None,
    exclude_document_snapshots: bool = False,
    ruleset: Ruleset = DEFAULT_RULESET,
    on_decision: DecisionHook | None = None,
) -> list[ExportRow]:
    """Une ligne par objet retenu, dans l'ordre du listing."""
    return [
        to_export_row(obj, decision, ruleset)
        for obj, decision in reconcile(
            objects, reference_set,
            exclude_document_snapshots=exclude_document_snapshots,
            ruleset=ruleset,
            on_decision=on_decision,
        )
        if decision.included
    ]


class StatsBuilder:
    """Accumule les décisions dans un arbre de statistiques.

    La décision d'inclusion est connue avant toute mutation : les
    snapshots et vignettes de documents sont comptés dans leur sous-total
    même lorsqu'ils sont exclus des totaux.
    """

    def __init__(self, exclude_document_snapshots: bool = False):
        self.stats = StorageStats.empty(exclude_document_snapshots)

    def add(self, obj: StoredObject, decision: Decision) -> None:
        category = self.stats.categories.get(decision.category)
        if category is None:
            raise AssertionError(
                f"Catégorie inattendue {decision.category!r}"
                f" pour {obj.key!r}"
            )

        excluded_snapshot = (
            decision.category == DOCUMENTS
            and decision.role == SNAPSHOT
            and decision.reason == DOCUMENT_SNAPSHOT
        )
        if excluded_snapshot:
            category.by_path[SNAPSHOT].add(obj.size)
            return

        excluded_thumbnail = (
            decision.category == DOCUMENTS
            and decision.role == THUMBNAIL
            and decision.reason in (THUMBNAIL_SCOPE, DOCUMENT_THUMBNAIL)
        )
        if excluded_thumbnail:
            category.by_path[THUMBNAIL].add(obj.size)
            return

        if not decision.included:
            return

        self.stats.total.add(obj.size)
        category.count += 1
        category.size += obj.size
        category.by_extension.setdefault(
            decision.extension, Counter(),
        ).add(obj.size)
        if category.by_path is not None:
            category.by_path[decision.role].add(obj.size)


def build_stats(
    objects: Iterable[StoredObject],
    reference_set: frozenset[str] | None,
    exclude_document_snapshots: bool = False,
    ruleset: Ruleset = DEFAULT_RULESET,
    on_decision: DecisionHook | None = None,
) -> StorageStats:
    """Statistiques par catégorie, extension et rôle de chemin."""
    builder = StatsBuilder(exclude_document_snapshots)
    for obj, decision in reconcile(
        objects, reference_set,
        exclude_document_snapshots=exclude_document_snapshots,
        ruleset=ruleset,
        on_decision=on_decision,
    ):
        builder.add(obj, decision)
    return builder.stats
