"""Interface CLI pour s3reconcile."""

import sys
from contextlib import closing

import boto3
import click
from rich.console import Console
from rich.markup import escape
from sqlalchemy.engine import URL

from s3reconcile import references
from s3reconcile.aggregator import build_export_rows, build_stats
from s3reconcile.models import Decision
from s3reconcile.reporter import stats_to_json, stats_to_table, to_csv
from s3reconcile.scanner import list_objects

console = Console(stderr=True)


def _bucket_options(fn):
    """Options communes : bucket, préfixe, endpoint, règles d'exclusion."""
    options = [
        click.option(
            "--bucket", envvar="S3_BUCKET_NAME", required=True,
            help="Nom du bucket S3.",
        ),
        click.option(
            "--prefix", envvar="S3_PREFIX", default="",
            help="Préfixe pour filtrer.",
        ),
        click.option(
            "--exclude-document-snapshots", is_flag=True, default=False,
            envvar="EXCLUDE_DOCUMENT_SNAPSHOTS",
            help="Exclure les snapshots de documents.",
        ),
        click.option(
            "--endpoint-url",
            envvar="AWS_ENDPOINT_URL",
            default=None,
            help="URL du endpoint S3 (pour les services S3-compatibles).",
        ),
        click.option(
            "--debug", is_flag=True, default=False,
            envvar="S3RECONCILE_DEBUG",
            help="Afficher chaque décision de classification.",
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _db_options(fn):
    """Options de connexion à la base des références."""
    options = [
        click.option(
            "--db-url", envvar="DATABASE_URL", default=None,
            help="URL SQLAlchemy de la base (prioritaire sur --db-host...).",
        ),
        click.option("--db-host", envvar="DB_HOST", default=None),
        click.option("--db-port", envvar="DB_PORT", default=5432, type=int),
        click.option("--db-name", envvar="DB_NAME", default=None),
        click.option("--db-user", envvar="DB_USER", default=None),
        click.option("--db-password", envvar="DB_PASSWORD", default=None),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def resolve_db_url(db_url, db_host, db_port, db_name, db_user, db_password):
    """URL de la base : --db-url, sinon assemblée depuis les composants."""
    if db_url:
        return db_url
    if not (db_host and db_name and db_user and db_password):
        raise click.UsageError(
            "Configuration base requise : --db-url ou"
            " --db-host, --db-name, --db-user, --db-password."
        )
    return URL.create(
        "postgresql+psycopg2",
        username=db_user,
        password=db_password,
        host=db_host,
        port=db_port,
        database=db_name,
    )


def _make_s3_client(endpoint_url=None):
    """Crée un client S3 boto3, avec endpoint custom si fourni."""
    kwargs = {}
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return boto3.client("s3", **kwargs)


def _log_decision(decision: Decision) -> None:
    """Trace une décision de classification sur stderr."""
    verdict = (
        "[green]retenu[/green]" if decision.included
        else f"[dim]exclu ({decision.reason})[/dim]"
    )
    console.log(
        f"{escape(decision.key)} | ext: {decision.extension or '-'}"
        f" | {decision.category}/{decision.role} | {verdict}"
    )


def _load_references(db_url):
    """Charge l'index des références ; quitte le run en cas d'échec."""
    try:
        engine = references.connect(db_url)
    except Exception as e:
        console.print(f"[red]Erreur DB :[/red] {e}")
        sys.exit(1)

    try:
        reference_set = references.load_reference_set(engine)
    except Exception as e:
        console.print(f"[red]Erreur DB :[/red] {e}")
        sys.exit(1)
    finally:
        engine.dispose()

    if not reference_set:
        console.print(
            "[yellow]Attention :[/yellow] aucune référence en base,"
            " résultat vide."
        )
    else:
        console.print(
            f"[green]Références :[/green] {len(reference_set)}"
            " identités connues."
        )
    return reference_set


def _write_output(content, output):
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(content)
        console.print(f"[green]Rapport écrit :[/green] {output}")
    else:
        click.echo(content, nl=False)


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """Réconciliation d'un bucket S3 avec les médias référencés en base."""


@cli.command()
@_bucket_options
@_db_options
@click.option(
    "--output", "-o",
    default=None,
    help="Fichier CSV de sortie (défaut : stdout).",
)
def export(
    bucket, prefix, exclude_document_snapshots, endpoint_url, debug,
    db_url, db_host, db_port, db_name, db_user, db_password, output,
):
    """Exporter en CSV les objets S3 référencés en base."""
    url = resolve_db_url(
        db_url, db_host, db_port, db_name, db_user, db_password,
    )
    reference_set = _load_references(url)

    try:
        listing = list_objects(
            bucket, prefix=prefix, s3_client=_make_s3_client(endpoint_url),
        )
        with closing(listing) as objects:
            rows = build_export_rows(
                objects,
                reference_set,
                exclude_document_snapshots=exclude_document_snapshots,
                on_decision=_log_decision if debug else None,
            )
    except Exception as e:
        console.print(f"[red]Erreur export :[/red] {e}")
        sys.exit(1)

    console.print(f"[green]Export terminé :[/green] {len(rows)} objets retenus.")
    _write_output(to_csv(rows), output)


@cli.command()
@_bucket_options
@_db_options
@click.option(
    "--format", "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Format du rapport.",
)
@click.option(
    "--output", "-o",
    default=None,
    help="Fichier de sortie (défaut : stdout).",
)
@click.option(
    "--no-reference", is_flag=True, default=False,
    help="Analyser tout le bucket, sans filtrer par la base.",
)
def analyze(
    bucket, prefix, exclude_document_snapshots, endpoint_url, debug,
    db_url, db_host, db_port, db_name, db_user, db_password,
    fmt, output, no_reference,
):
    """Statistiques de stockage par type de média et rôle de chemin."""
    reference_set = None
    if not no_reference:
        url = resolve_db_url(
            db_url, db_host, db_port, db_name, db_user, db_password,
        )
        reference_set = _load_references(url)

    try:
        listing = list_objects(
            bucket, prefix=prefix, s3_client=_make_s3_client(endpoint_url),
        )
        with closing(listing) as objects:
            stats = build_stats(
                objects,
                reference_set,
                exclude_document_snapshots=exclude_document_snapshots,
                on_decision=_log_decision if debug else None,
            )
    except Exception as e:
        console.print(f"[red]Erreur analyse :[/red] {e}")
        sys.exit(1)

    if fmt == "json":
        content = stats_to_json(stats)
    else:
        content = stats_to_table(stats, bucket=bucket, prefix=prefix)
    _write_output(content, output)
