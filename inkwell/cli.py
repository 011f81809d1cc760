"""Command-line interface for Inkwell.

This module defines the CLI commands using the Click framework.

Commands:
- build: Build the site into the output directory.
- routes: List every route the current content produces.
- post: Create a new post interactively.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import click
import questionary

from . import __version__
from .content import ContentEntry, serialize_entry
from .utils import slugify


@click.group()
@click.version_option(version=__version__, prog_name="inkwell")
def cli():
    """Inkwell static blog builder."""


@cli.command()
@click.option(
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Write the site here instead of inkwell.yaml output_dir",
)
@click.option("--root-url", help="Rewrite root-relative links to live under this URL")
@click.option("--jobs", type=click.IntRange(min=1), help="Routes rendered in parallel")
def build(output_dir: Path | None, root_url: str | None, jobs: int | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import BuildError, build_site

    try:
        result = build_site(
            project_root,
            output_dir_override=output_dir,
            root_url=root_url,
            jobs=jobs,
        )
    except BuildError as exc:
        _report_build_error(exc, project_root)
        raise SystemExit(1) from None
    click.echo(
        f"Built {len(result.routes)} routes from {len(result.entries)} entries "
        f"({len(result.entries.drafts())} drafts) into {result.output_dir}"
    )


@cli.command()
def routes():
    """List every route the current content produces."""
    project_root = Path.cwd()
    from .build import BuildError, load_site
    from .routes import generate_routes, sorted_routes

    try:
        _, _, entries = load_site(project_root)
    except BuildError as exc:
        _report_build_error(exc, project_root)
        raise SystemExit(1) from None
    for route in sorted_routes(generate_routes(entries)):
        click.echo(f"{route.kind.value:<20} {route.path}")


@cli.command()
@click.argument("title", required=False)
def post(title: str | None):
    """Create a new post interactively."""
    project_root = Path.cwd()
    from .build import load_config

    config = load_config(project_root)
    content_dir = project_root / config["content_dir"]

    if not title:
        title = questionary.text(
            "Title:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if title is None:
            raise click.Abort()
    title = title.strip()

    slug = slugify(title)
    if not slug:
        raise click.ClickException(f"Cannot derive a slug from title: {title!r}")
    existing = [p for p in (content_dir / f"{slug}.md", content_dir / f"{slug}.mdx") if p.exists()]
    if existing:
        raise click.ClickException(
            f"File already exists: {existing[0].relative_to(project_root)}"
        )

    description = questionary.text(
        "Description:",
        validate=lambda x: len(x.strip()) > 0 or "Description cannot be empty",
        style=_questionary_style(),
    ).ask()
    if description is None:
        raise click.Abort()

    draft = questionary.confirm(
        "Start as a draft?",
        default=True,
        style=_questionary_style(),
    ).ask()
    if draft is None:
        raise click.Abort()

    entry = ContentEntry(
        slug=slug,
        title=title,
        description=description.strip(),
        pub_date=date.today(),
        body=f"\n# {title}\n\n",
        draft=draft,
    )
    content_dir.mkdir(parents=True, exist_ok=True)
    target = content_dir / f"{slug}.md"
    target.write_text(serialize_entry(entry), encoding="utf-8")
    click.echo(f"Created {target.relative_to(project_root)}")


def _report_build_error(exc, project_root: Path) -> None:
    """Print a build failure in the CLI's error style."""
    try:
        shown = exc.source_path.relative_to(project_root)
    except ValueError:
        shown = exc.source_path
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {shown}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
