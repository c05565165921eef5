# SPDX-License-Identifier: Apache-2.0
"""Click CLI entry point. Install with: pip install . then arbase --help."""
from pathlib import Path

import click

from .client import ResearchBaseClient
from .exceptions import APIError

DEFAULT_TOKEN_FILE = Path.home() / ".arbase" / "token"


def _read_token(path: Path) -> str | None:
    if path.is_file():
        return path.read_text(encoding="utf-8").strip() or None
    return None


class ApiErrorGroup(click.Group):
    """Render API failures as click errors (exit code 1)."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except APIError as e:
            raise click.ClickException(e.message) from e


@click.group(cls=ApiErrorGroup)
@click.option("--api-url", default="http://localhost:8000", envvar="ARBASE_API_URL", help="API base URL")
@click.option(
    "--token-file",
    default=str(DEFAULT_TOKEN_FILE),
    envvar="ARBASE_TOKEN_FILE",
    type=click.Path(dir_okay=False),
    help="Where the access token is stored after login",
)
@click.pass_context
def cli(ctx, api_url, token_file):
    """Africa Research Base: upload datasets, review them, earn points."""
    ctx.ensure_object(dict)
    token_path = Path(token_file)
    ctx.obj["token_file"] = token_path
    ctx.obj["client"] = ResearchBaseClient(api_url, token=_read_token(token_path))


@cli.command()
@click.option("--email", required=True, help="Account email")
@click.password_option(confirmation_prompt=False)
@click.pass_context
def login(ctx, email, password):
    """Log in and store the access token locally."""
    token = ctx.obj["client"].login(email, password)
    path: Path = ctx.obj["token_file"]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(token, encoding="utf-8")
    path.chmod(0o600)
    click.echo(f"Logged in as {email}.")


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--title", required=True, help="Dataset title")
@click.option("--field", "research_field", required=True, help="Research field, e.g. health")
@click.option("--description", default="", help="Dataset description")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--price", "price_usd", default=0.0, type=float, help="Price in USD")
@click.pass_context
def upload(ctx, file_path, title, research_field, description, tags, price_usd):
    """Upload a dataset for AI scoring and peer review."""
    r = ctx.obj["client"].upload_dataset(file_path, title, research_field, description, list(tags), price_usd)
    dataset = r["dataset"]
    click.echo(f"Dataset ID: {dataset['id']}")
    click.echo(f"AI confidence score: {dataset['ai_confidence_score']}")
    click.echo(f"Status: {dataset['status']}")
    click.echo(f"Points earned: {r['rewards']['points_earned']}")


@cli.command()
@click.option("--field", default=None, help="Filter by research field")
@click.option("--tag", default=None, help="Filter by tag")
@click.option("--search", default=None, help="Search title, description and file name")
@click.option("--limit", default=20, type=click.IntRange(1, 100))
@click.option("--offset", default=0, type=click.IntRange(0))
@click.pass_context
def datasets(ctx, field, tag, search, limit, offset):
    """List verified public datasets."""
    r = ctx.obj["client"].list_datasets(field=field, tag=tag, search=search, limit=limit, offset=offset)
    for d in r["datasets"]:
        score = d.get("final_verification_score")
        score_s = f"{score:.1f}" if score is not None else "-"
        click.echo(f"{d['id']:>6}  {score_s:>5}  {d['research_field']:<15} {d['title']}")
    click.echo(f"{len(r['datasets'])} of {r['total']} datasets")


@cli.command()
@click.argument("dataset_id", type=int)
@click.option("--accuracy", required=True, type=click.IntRange(1, 5))
@click.option("--completeness", required=True, type=click.IntRange(1, 5))
@click.option("--relevance", required=True, type=click.IntRange(1, 5))
@click.option("--methodology", required=True, type=click.IntRange(1, 5))
@click.option("--feedback", default="")
@click.option(
    "--recommendation",
    default="approve",
    type=click.Choice(["approve", "reject", "needs_improvement"]),
)
@click.pass_context
def review(ctx, dataset_id, accuracy, completeness, relevance, methodology, feedback, recommendation):
    """Review someone else's dataset (ratings 1-5)."""
    r = ctx.obj["client"].submit_review(
        dataset_id, accuracy, completeness, relevance, methodology, feedback, recommendation
    )
    v = r["verification"]
    click.echo(f"Final score: {v['final_score']} (AI {v['ai_score']}, human {v['human_score']})")
    click.echo(f"Verified: {v['is_verified']}")
    click.echo(f"Points earned: {r['rewards']['points_earned']}")


@cli.command()
@click.option("--limit", default=20, type=click.IntRange(1, 100))
@click.pass_context
def pending(ctx, limit):
    """Datasets waiting for your review."""
    rows = ctx.obj["client"].pending_reviews(limit=limit)
    if not rows:
        click.echo("Nothing to review.")
    for d in rows:
        click.echo(f"{d['id']:>6}  AI {d.get('ai_confidence_score') or 0:>3}  {d['title']}")


@cli.command()
@click.pass_context
def points(ctx):
    """Points balance and recent ledger entries."""
    r = ctx.obj["client"].points()
    click.echo(f"Total points: {r['total_points']}")
    for t in r["transactions"][:10]:
        click.echo(f"  {t['points']:+5d}  {t['transaction_type']:<20} {t['description']}")


def main():
    """Entry point for console_scripts."""
    cli(obj={})


if __name__ == "__main__":
    main()
