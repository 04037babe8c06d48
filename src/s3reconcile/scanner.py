"""Scanner S3 — listing paginé du bucket."""

from collections.abc import Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from s3reconcile.models import ListingError, StoredObject

# Nombre maximal de clés par page de listing
PAGE_SIZE = 1000

console = Console(stderr=True)


def to_stored_object(obj: dict) -> StoredObject:
    """Convertit une entrée 'Contents' de list_objects_v2."""
    return StoredObject(
        key=obj["Key"],
        size=obj.get("Size", 0) or 0,
        etag=obj.get("ETag", ""),
        last_modified=obj.get("LastModified"),
        storage_class=obj.get("StorageClass") or "STANDARD",
    )


def list_objects(
    bucket: str,
    prefix: str = "",
    s3_client=None,
    page_size: int = PAGE_SIZE,
) -> Iterator[StoredObject]:
    """Liste paresseusement les objets d'un bucket S3.

    Une page en échec interrompt le listing avec ListingError : jamais
    de résultat tronqué présenté comme complet.
    """
    if s3_client is None:
        s3_client = boto3.client("s3")

    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(
        Bucket=bucket,
        Prefix=prefix,
        PaginationConfig={"PageSize": page_size},
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.fields[status]}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(
            f"Listing s3://{bucket}/{prefix}",
            status="0 objets",
        )
        listed = 0
        try:
            for page in pages:
                for obj in page.get("Contents", []):
                    listed += 1
                    yield to_stored_object(obj)
                progress.update(task, status=f"{listed} objets")
        except (ClientError, BotoCoreError) as e:
            raise ListingError(
                f"Échec du listing de s3://{bucket}/{prefix} : {e}"
            ) from e
