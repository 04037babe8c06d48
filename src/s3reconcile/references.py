"""Index des références — identités de base connues de la base applicative."""

from collections.abc import Iterable

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from s3reconcile.identity import extract_base_identity
from s3reconcile.models import ReferenceDataError

QUERY_MEDIA_URLS = """\
SELECT DISTINCT url
FROM medias
WHERE url IS NOT NULL AND url != ''
"""

QUERY_USER_PICTURES = """\
SELECT DISTINCT picture
FROM users
WHERE picture IS NOT NULL AND picture != ''
"""


def build_reference_set(
    media_urls: Iterable[str | None],
    user_pictures: Iterable[str | None],
) -> frozenset[str]:
    """Construit l'ensemble des identités de base référencées.

    Les valeurs nulles ou vides sont ignorées.
    """
    identities = set()
    for values in (media_urls, user_pictures):
        for value in values:
            if not value:
                continue
            identity = extract_base_identity(value)
            if identity:
                identities.add(identity)
    return frozenset(identities)


def connect(db_url: str) -> Engine:
    """Crée le moteur SQLAlchemy vers la base applicative."""
    return create_engine(db_url, pool_pre_ping=True)


def fetch_media_urls(conn: Connection) -> list[str | None]:
    """URLs de la table medias."""
    return [r[0] for r in conn.execute(text(QUERY_MEDIA_URLS))]


def fetch_user_pictures(conn: Connection) -> list[str | None]:
    """Photos de profil de la table users."""
    return [r[0] for r in conn.execute(text(QUERY_USER_PICTURES))]


def load_reference_set(engine: Engine) -> frozenset[str]:
    """Exécute les deux requêtes en lecture et construit l'index.

    Toute erreur SQL est terminale pour le run.
    """
    try:
        with engine.connect() as conn:
            media_urls = fetch_media_urls(conn)
            user_pictures = fetch_user_pictures(conn)
    except SQLAlchemyError as e:
        raise ReferenceDataError(
            f"Échec des requêtes de références : {e}"
        ) from e
    return build_reference_set(media_urls, user_pictures)
