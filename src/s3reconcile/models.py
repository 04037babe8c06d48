"""Structures de données partagées pour s3reconcile."""

from dataclasses import dataclass, field
from datetime import datetime

# Catégories de média
IMAGES = "images"
VIDEOS = "videos"
DOCUMENTS = "documents"
OTHER = "other"
CATEGORIES = (IMAGES, VIDEOS, DOCUMENTS, OTHER)

# Rôles de chemin (fichier original ou dérivé)
ORIGINAL = "original"
THUMBNAIL = "thumbnail"
REDUCED = "reduced"
SNAPSHOT = "snapshot"
PATH_ROLES = (ORIGINAL, THUMBNAIL, REDUCED, SNAPSHOT)

# Catégories disposant d'une ventilation par rôle de chemin
CATEGORIES_WITH_PATHS = (IMAGES, DOCUMENTS)

# Extensions reconnues (sans le point, en minuscules)
IMAGE_EXTENSIONS = frozenset({
    "jpg", "jpeg", "png", "gif", "bmp", "webp", "tiff", "tif", "svg",
})
VIDEO_EXTENSIONS = frozenset({
    "mp4", "avi", "mov", "wmv", "flv", "mkv", "webm", "m4v",
})
DOCUMENT_EXTENSIONS = frozenset({
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "rtf",
})

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


class S3ReconcileError(Exception):
    """Erreur terminale d'un run de réconciliation."""


class ReferenceDataError(S3ReconcileError):
    """Échec des requêtes de références en base."""


class ListingError(S3ReconcileError):
    """Échec du listing paginé du bucket."""


@dataclass(frozen=True)
class Ruleset:
    """Règles de classification et de formatage d'un run."""

    image_extensions: frozenset[str] = IMAGE_EXTENSIONS
    video_extensions: frozenset[str] = VIDEO_EXTENSIONS
    document_extensions: frozenset[str] = DOCUMENT_EXTENSIONS
    documents_folder: str = "Documents"
    thumbnail_prefix: str = "CarImages/"
    size_units: tuple[str, ...] = SIZE_UNITS


DEFAULT_RULESET = Ruleset()


@dataclass(frozen=True)
class StoredObject:
    """Représente un objet S3 listé."""

    key: str
    size: int
    etag: str = ""
    last_modified: datetime | None = None
    storage_class: str = "STANDARD"


@dataclass(frozen=True)
class Decision:
    """Résultat de la politique d'inclusion pour un objet."""

    key: str
    included: bool
    category: str
    role: str
    base_identity: str
    extension: str
    reason: str | None = None


@dataclass
class ExportRow:
    """Ligne de l'export CSV."""

    key: str
    filename: str
    extension: str
    category: str
    role: str
    size: int
    size_human: str
    last_modified: str
    storage_class: str
    etag: str


@dataclass
class Counter:
    """Compteur cumulé (nombre d'objets, octets)."""

    count: int = 0
    size: int = 0

    def add(self, size: int) -> None:
        self.count += 1
        self.size += size


@dataclass
class CategoryStats:
    """Statistiques d'une catégorie de média."""

    count: int = 0
    size: int = 0
    by_extension: dict[str, Counter] = field(default_factory=dict)
    by_path: dict[str, Counter] | None = None


@dataclass
class StorageStats:
    """Arbre de statistiques : catégorie → extension / rôle."""

    categories: dict[str, CategoryStats]
    total: Counter = field(default_factory=Counter)
    exclude_document_snapshots: bool = False

    @classmethod
    def empty(cls, exclude_document_snapshots: bool = False) -> "StorageStats":
        """Arbre à zéro, avec ventilation par rôle pour images et documents."""
        categories = {}
        for category in CATEGORIES:
            by_path = None
            if category in CATEGORIES_WITH_PATHS:
                by_path = {role: Counter() for role in PATH_ROLES}
            categories[category] = CategoryStats(by_path=by_path)
        return cls(
            categories=categories,
            exclude_document_snapshots=exclude_document_snapshots,
        )
