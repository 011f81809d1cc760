"""Site building for Inkwell.

This module runs one build pass: it loads configuration and site data,
loads every entry of the content store, checks the assets the build depends
on, derives the routes and renders each of them into the output directory.

Every route is rendered in memory before the output directory is touched,
so a failed build leaves the previous output in place.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads build configuration from inkwell.yaml.
- load_data: Loads site data from YAML files in the data directory.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateSyntaxError

from .artifacts import ArtifactRegistry, RenderContext, create_default_artifact_registry
from .assets import AssetNotFoundError, StaticAssetPipeline, resolve_static_image
from .collections import EntryCollection
from .content import CollectionLoader, ContentError
from .feeds import build_listing
from .html_utils import absolutize_html_urls
from .images import FontSet
from .renderers import MarkdownRenderer
from .routes import Route, generate_routes, sorted_routes
from .templates import TemplateEngine
from .utils import ensure_clean_dir


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


DEFAULT_CONFIG: dict[str, Any] = {
    "output_dir": "dist",
    "content_dir": "content/blog",
    "public_dir": "public",
    "template_dir": "templates",
    "fonts": {
        "regular": "fonts/GeistMono-Regular.ttf",
        "bold": "fonts/GeistMono-Bold.ttf",
    },
    "highlight_style": "one-dark",
    "root_url": "",
    "jobs": 1,
}

DEFAULT_SITE: dict[str, Any] = {
    "title": "Blog",
    "description": "",
    "url": "",
    "signature": "",
    "intro": "",
    "feed_title": "",
    "feed_description": "",
}


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        entries: Every loaded entry, drafts included.
        routes: Routes written, in write order.
        output_dir: Directory where the site was built.
        data: Site data dictionary.
    """

    entries: EntryCollection
    routes: list[Route]
    output_dir: Path
    data: dict[str, Any]


def load_config(project_root: Path) -> dict[str, Any]:
    """Load build configuration from inkwell.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / "inkwell.yaml"
    config = dict(DEFAULT_CONFIG)
    config["fonts"] = dict(DEFAULT_CONFIG["fonts"])
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if isinstance(loaded, dict):
            fonts = loaded.pop("fonts", None)
            config.update(loaded)
            if isinstance(fonts, dict):
                config["fonts"].update(fonts)
    return config


def load_data(project_root: Path) -> dict[str, Any]:
    """Load site data from YAML files in the data directory.

    ``site.yaml`` is merged into the top level over DEFAULT_SITE; every other
    file is exposed under its stem.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing merged site data.
    """
    data: dict[str, Any] = dict(DEFAULT_SITE)
    data_dir = project_root / "data"
    if not data_dir.exists():
        return _fill_site_defaults(data)
    for path in sorted(data_dir.glob("*.yaml")):
        with open(path, encoding="utf-8") as f:
            payload = yaml.safe_load(f) or {}
        if not isinstance(payload, dict):
            continue
        if path.name == "site.yaml":
            data.update(payload)
        else:
            data[path.stem] = payload
    return _fill_site_defaults(data)


def _fill_site_defaults(data: dict[str, Any]) -> dict[str, Any]:
    data["feed_title"] = data.get("feed_title") or data.get("title") or ""
    data["feed_description"] = data.get("feed_description") or data.get("description") or ""
    return data


def load_site(project_root: Path) -> tuple[dict[str, Any], dict[str, Any], EntryCollection]:
    """Load configuration, site data and entries.

    Raises:
        BuildError: If any content file fails to load.
    """
    config = load_config(project_root)
    data = load_data(project_root)
    loader = CollectionLoader(project_root / config["content_dir"])
    try:
        entries = loader.load()
    except ContentError as exc:
        raise BuildError(exc.source_path, exc.message, exc) from exc
    return config, data, entries


def build_site(
    project_root: Path,
    output_dir_override: Path | None = None,
    root_url: str | None = None,
    clean_output: bool = True,
    jobs: int | None = None,
    registry: ArtifactRegistry | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        output_dir_override: Write here instead of the configured output_dir.
        root_url: Base URL root-relative links are rewritten to.
        clean_output: Whether to wipe the output directory before building.
        jobs: Number of routes rendered concurrently; defaults to config.
        registry: Optional custom artifact registry.

    Returns:
        BuildResult containing entries, routes, output directory and data.

    Raises:
        BuildError: On a content load error, a missing asset or a failing
            render.
    """
    config, data, entries = load_site(project_root)
    if root_url is not None:
        config["root_url"] = root_url
    resolved_root = str(config.get("root_url") or "")
    public_dir = project_root / config["public_dir"]

    for entry in entries:
        if not entry.image:
            continue
        try:
            resolve_static_image(public_dir, entry.image)
        except AssetNotFoundError as exc:
            raise BuildError(entry.path or project_root, str(exc), exc) from exc

    try:
        fonts = FontSet.load(project_root, config["fonts"])
    except AssetNotFoundError as exc:
        raise BuildError(exc.searched_paths[0], str(exc), exc) from exc

    engine = TemplateEngine(
        data,
        template_dir=project_root / config["template_dir"],
        root_url=resolved_root or None,
        highlight_style=str(config.get("highlight_style") or "default"),
    )
    listing, feed = build_listing(entries, data)
    context = RenderContext(
        entries=entries,
        listing=listing,
        feed=feed,
        data=data,
        engine=engine,
        fonts=fonts,
        markdown=MarkdownRenderer(),
    )
    registry = registry or create_default_artifact_registry()
    routes = sorted_routes(generate_routes(entries))

    def render(route: Route) -> bytes:
        try:
            payload = registry.render(route, context)
        except TemplateSyntaxError as exc:
            raise BuildError(
                Path(exc.filename or exc.name or "templates"),
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except Exception as exc:
            raise BuildError(
                _route_source(route, context, project_root),
                _format_error_message(exc),
                exc,
            ) from exc
        if resolved_root and route.is_html:
            payload = absolutize_html_urls(payload.decode("utf-8"), resolved_root).encode("utf-8")
        return payload

    # Every route renders before the output directory is touched
    workers = jobs if jobs is not None else int(config.get("jobs") or 1)
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            payloads = list(pool.map(render, routes))
    else:
        payloads = [render(route) for route in routes]

    output_dir = output_dir_override or (project_root / config["output_dir"])
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
    for route, payload in zip(routes, payloads):
        _write_artifact(output_dir, route, payload)

    StaticAssetPipeline(public_dir, output_dir).run()
    return BuildResult(entries=entries, routes=routes, output_dir=output_dir, data=data)


def _route_source(route: Route, context: RenderContext, project_root: Path) -> Path:
    entry = context.entries.get(route.slug or "")
    if entry is not None and entry.path is not None:
        return entry.path
    return project_root / route.output_path


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"


def _write_artifact(output_dir: Path, route: Route, payload: bytes) -> None:
    """Write a rendered artifact to the output directory.

    Args:
        output_dir: Base output directory.
        route: Route the payload belongs to.
        payload: Rendered file contents.
    """
    target = output_dir / route.output_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(payload)
