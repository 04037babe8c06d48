"""Politique d'inclusion — pipeline ordonné de règles d'exclusion."""

from s3reconcile.identity import extract_base_identity, extract_extension
from s3reconcile.models import (
    DEFAULT_RULESET,
    DOCUMENTS,
    SNAPSHOT,
    THUMBNAIL,
    Decision,
    Ruleset,
    StoredObject,
)

# Motifs d'exclusion, dans l'ordre d'évaluation
FOLDER_MARKER = "folder_marker"
UNREFERENCED = "unreferenced"
THUMBNAIL_SCOPE = "thumbnail_scope"
DOCUMENT_THUMBNAIL = "document_thumbnail"
DOCUMENT_SNAPSHOT = "document_snapshot"


def is_folder_marker(obj: StoredObject) -> bool:
    """Objet vide terminé par '/' : marqueur de dossier S3."""
    return obj.size == 0 and obj.key.endswith("/")


def evaluate(
    obj: StoredObject,
    category: str,
    role: str,
    reference_set: frozenset[str] | None,
    exclude_document_snapshots: bool = False,
    ruleset: Ruleset = DEFAULT_RULESET,
) -> Decision:
    """Décide si un objet classifié est retenu.

    Chaque étape peut rejeter et court-circuite les suivantes :
    marqueur de dossier, absence de référence, vignette hors du
    préfixe autorisé, exclusions propres aux documents.

    Un reference_set à None désactive la vérification des références
    (analyse du bucket brut).
    """
    base_identity = extract_base_identity(obj.key)

    def decide(reason: str | None = None) -> Decision:
        return Decision(
            key=obj.key,
            included=reason is None,
            category=category,
            role=role,
            base_identity=base_identity,
            extension=extract_extension(obj.key),
            reason=reason,
        )

    if is_folder_marker(obj):
        return decide(FOLDER_MARKER)

    # Les dérivés partagent l'identité de base de leur original
    if reference_set is not None and base_identity not in reference_set:
        return decide(UNREFERENCED)

    if role == THUMBNAIL and not obj.key.startswith(ruleset.thumbnail_prefix):
        return decide(THUMBNAIL_SCOPE)

    if category == DOCUMENTS:
        if role == THUMBNAIL:
            return decide(DOCUMENT_THUMBNAIL)
        if role == SNAPSHOT and exclude_document_snapshots:
            return decide(DOCUMENT_SNAPSHOT)

    return decide()


def should_include(
    obj: StoredObject,
    category: str,
    role: str,
    reference_set: frozenset[str] | None,
    exclude_document_snapshots: bool = False,
    ruleset: Ruleset = DEFAULT_RULESET,
) -> bool:
    """Variante booléenne de evaluate()."""
    return evaluate(
        obj, category, role, reference_set,
        exclude_document_snapshots=exclude_document_snapshots,
        ruleset=ruleset,
    ).included
