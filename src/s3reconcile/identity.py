"""Identité de base des clés S3 et des URLs en base.

L'identité de base est le nom de fichier sans query string, sans chemin
et sans extension : c'est la clé de jointure entre le listing du bucket
et les références de la base.
"""


def extract_filename(path_or_url: str) -> str:
    """Retourne le dernier segment du chemin, query string retirée."""
    without_query = path_or_url.split("?", 1)[0]
    return without_query.rsplit("/", 1)[-1]


def extract_base_identity(path_or_url: str) -> str:
    """Nom de fichier sans extension.

    Un point en position 0 (ex: ".env") n'est pas un séparateur
    d'extension : le nom est retourné tel quel.
    """
    filename = extract_filename(path_or_url)
    last_dot = filename.rfind(".")
    if last_dot > 0:
        return filename[:last_dot]
    return filename


def extract_extension(key: str) -> str:
    """Extension en minuscules, chaîne vide si absente."""
    filename = extract_filename(key)
    parts = filename.split(".")
    if len(parts) < 2:
        return ""
    return parts[-1].lower()
