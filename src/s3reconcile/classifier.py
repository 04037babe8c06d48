"""Classification des objets : catégorie de média et rôle de chemin."""

from s3reconcile.models import (
    DEFAULT_RULESET,
    DOCUMENTS,
    IMAGES,
    ORIGINAL,
    OTHER,
    REDUCED,
    SNAPSHOT,
    THUMBNAIL,
    VIDEOS,
    Ruleset,
)

# Marqueurs de chemin, testés dans cet ordre (le premier gagne)
_PATH_MARKERS = (
    ("/thumbnail/", THUMBNAIL),
    ("/reduced/", REDUCED),
    ("/snapshot_", SNAPSHOT),
)


def is_in_documents_folder(key: str, ruleset: Ruleset = DEFAULT_RULESET) -> bool:
    """Vérifie si la clé est sous un dossier Documents (racine ou imbriqué)."""
    folder = ruleset.documents_folder
    return key.startswith(f"{folder}/") or f"/{folder}/" in key


def classify(
    key: str,
    extension: str,
    ruleset: Ruleset = DEFAULT_RULESET,
) -> str:
    """Assigne une catégorie de média à un objet.

    Le dossier Documents prime sur l'extension : un scan enregistré
    en .jpg reste un document.
    """
    if is_in_documents_folder(key, ruleset):
        return DOCUMENTS

    ext = extension.strip()
    if ext in ruleset.image_extensions:
        return IMAGES
    if ext in ruleset.video_extensions:
        return VIDEOS
    if ext in ruleset.document_extensions:
        return DOCUMENTS
    return OTHER


def classify_path_role(key: str) -> str:
    """Rôle du fichier par rapport à l'original (original par défaut)."""
    for marker, role in _PATH_MARKERS:
        if marker in key:
            return role
    return ORIGINAL
