"""Cyclopts CLI entrypoint for generating documents from a configured source.

The ``website-text`` console script reads ``config/website-text.yaml``,
builds a :class:`~website_text.generator.Generator` for the configured source
and either serves one request path (``show``), scans the whole source
(``scan``) or invalidates the persisted state (``clear-cache``).

Examples
--------
Render the page served at ``/docs/install`` into a file:

>>> from website_text.cli import app
>>> app.run(["show", "/docs/install", "--output", "install.html"])  # doctest: +SKIP

List every document URL of the default configuration:

>>> from website_text.cli import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from .cache import FileCache
from .config import SiteConfig, load_site_config
from .generator import Generator
from .loaders import create_loader
from .parsers import MarkdownParser
from .renderer import PageRenderer

if typ.TYPE_CHECKING:
    from .summary import SummaryNode

DEFAULT_CONFIG = Path("config/website-text.yaml")

app = App(name="website-text", help="Generate linked documents from a text source.")

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="WEBSITE_TEXT_CONFIG")
]
VerboseOption = typ.Annotated[bool, Parameter(help="Log progress to stderr")]


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def build_generator(site_config: SiteConfig) -> Generator:
    """Wire loader, cache and parsers described by ``site_config``."""
    cache = (
        FileCache(site_config.cache.directory)
        if site_config.cache.directory is not None
        else None
    )
    return Generator(
        create_loader(site_config.source),
        site_config.options,
        cache=cache,
        parsers={"md": MarkdownParser(site_config.pygments_style)},
    )


def _summary_lines(node: SummaryNode, depth: int = 0) -> list[str]:
    lines: list[str] = []
    for element in node:
        marker = "" if element.visible else " (hidden)"
        target = element.url or ""
        if element.id:
            target = f"{target}#{element.id}"
        lines.append(f"{'  ' * depth}- {element.title} {target}{marker}".rstrip())
        lines.extend(_summary_lines(element, depth + 1))
    return lines


@app.command(help="Render the document served at a request path.")
def show(
    path: str,
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    output: typ.Annotated[
        Path | None, Parameter(help="Write the page to this file instead of stdout")
    ] = None,
    body_only: typ.Annotated[
        bool, Parameter(help="Emit the document body without the page template")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Handle ``path`` and print or write the rendered page.

    Parameters
    ----------
    path : str
        Request path, for example ``/docs/install``.
    config : Path, optional
        Path to the configuration file (overridable via ``WEBSITE_TEXT_CONFIG``).
    output : Path or None, optional
        Destination file; the page is printed when omitted.
    body_only : bool, optional
        Emit only the post-processed document HTML.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    SystemExit
        If no document is served at ``path``.
    """
    _configure_logging(verbose=verbose)
    site_config = load_site_config(config)
    generator = build_generator(site_config)
    document = generator.handle(path)
    if document is None:
        msg = f"No document found for '{path}'."
        raise SystemExit(msg)

    if body_only:
        html = document.rendered_content or ""
    else:
        renderer = PageRenderer(site_config.pygments_style)
        html = renderer.render(document, generator.summary)

    if output is None:
        print(html)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    print(f"wrote {_format_path(output)}")


@app.command(help="Scan every source document and report URLs, summary and errors.")
def scan(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Scan the configured source and print the resulting index.

    Per-document failures are listed after the index; they do not abort the
    scan. The scan result is written to the cache when one is configured.
    """
    _configure_logging(verbose=verbose)
    generator = build_generator(load_site_config(config))
    generator.scan()

    for url, filename in sorted((generator.urls or {}).items()):
        print(f"{url} -> {filename}")
    summary = generator.summary
    if summary is not None and len(summary):
        print()
        print("\n".join(_summary_lines(summary)))
    for filename, error in sorted(generator.errors.items()):
        cause = f": {error.__cause__}" if error.__cause__ is not None else ""
        print(f"error {filename}: {error}{cause}")


@app.command(name="clear-cache", help="Delete the cached generator state and documents.")
def clear_cache(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Invalidate every cache entry derived from the configured source."""
    _configure_logging(verbose=verbose)
    generator = build_generator(load_site_config(config))
    if generator.cache is None:
        print("no cache configured")
        return
    print("cache cleared" if generator.clear_cache() else "cache not cleared")


def main() -> None:
    """Invoke the Cyclopts application that powers the `website-text` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
