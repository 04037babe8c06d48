"""Utilitaires partagés."""

from s3reconcile.models import SIZE_UNITS


def human_size(size_bytes: int, units: tuple[str, ...] = SIZE_UNITS) -> str:
    """Convertit des bytes en format lisible (base 1024, seuils stricts).

    1023 → "1023 B", 1024 → "1.00 KB". Une valeur qui s'arrondit à
    1024.00 passe à l'unité suivante ; la dernière unité absorbe tout
    ce qui dépasse.
    """
    if size_bytes < 1024:
        return f"{size_bytes} {units[0]}"
    last = len(units) - 1
    for power, unit in enumerate(units[1:], start=1):
        value = round(size_bytes / 1024 ** power, 2)
        if value < 1024 or power == last:
            return f"{value:.2f} {unit}"
    return f"{size_bytes} {units[0]}"
