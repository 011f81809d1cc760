"""Inkwell static blog builder.

Inkwell turns a folder of markdown posts into a static personal site: one page
per post, a blog index, an RSS feed, a sitemap and a social preview image for
every post that does not ship its own.

The pipeline runs in one direction:
- content: load and validate posts from the content store
- routes: derive the output routes from the loaded entries
- feeds: aggregate published entries into the index listing and the feed
- artifacts: render each route (HTML, PNG, XML)
- build: orchestrate the pass and write the output directory

The main entry point is the CLI module.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
