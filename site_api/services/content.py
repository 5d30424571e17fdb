"""Front-matter content store — portfolio projects and testimonials.

Reads ``content/<collection>/*.mdx`` (and ``*.md``) files of the form::

    ---
    title: Riverside Wedding
    featured: true
    ---
    Body text...

Each document becomes a model with ``slug`` (file stem) and ``content``
(body) plus its front-matter fields.  Parsed collections are cached per
directory and re-read only when a file in it changes.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from site_api.config import get_settings
from site_api.models.content import PortfolioProject, Testimonial

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

CONTENT_SUFFIXES = (".mdx", ".md")

_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)(.*)\Z", re.DOTALL
)

# Directory cache: {directory: (fingerprint, documents)}
_collection_cache: dict[str, tuple[tuple[tuple[str, float], ...], list[Any]]] = {}


def parse_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split a document into (front-matter mapping, body).

    Documents without a front-matter block return an empty mapping and the
    whole text as body.

    Raises:
        ValueError: If the front matter is not valid YAML or not a mapping.
    """
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid front matter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Front matter must be a mapping")
    return data, match.group(2)


def _content_root(content_dir: str | None) -> Path:
    return Path(content_dir or get_settings().content_dir)


def _list_documents(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.suffix in CONTENT_SUFFIXES
    )


def load_collection(directory: Path, model: type[T]) -> list[T]:
    """Load every document in *directory* as *model*, in file-name order.

    Documents that fail to parse or validate are logged and skipped.
    """
    paths = _list_documents(directory)
    fingerprint = tuple((p.name, os.path.getmtime(p)) for p in paths)
    cache_key = f"{directory.resolve()}::{model.__name__}"

    cached = _collection_cache.get(cache_key)
    if cached is not None and cached[0] == fingerprint:
        return list(cached[1])

    documents: list[T] = []
    for path in paths:
        try:
            data, body = parse_front_matter(path.read_text(encoding="utf-8"))
            documents.append(model(**{**data, "slug": path.stem, "content": body}))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Skipping content file %s: %s", path, e)

    _collection_cache[cache_key] = (fingerprint, documents)
    logger.debug("Loaded %d documents from %s", len(documents), directory)
    return list(documents)


def _year_key(project: PortfolioProject) -> int:
    try:
        return int(project.year)
    except ValueError:
        return 0


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------


def get_all_portfolio_projects(
    content_dir: str | None = None,
) -> list[PortfolioProject]:
    """All projects, featured first, then newest year first."""
    projects = load_collection(
        _content_root(content_dir) / "portfolio", PortfolioProject
    )
    return sorted(projects, key=lambda p: (not p.featured, -_year_key(p)))


def get_featured_portfolio_projects(
    content_dir: str | None = None,
) -> list[PortfolioProject]:
    return [p for p in get_all_portfolio_projects(content_dir) if p.featured]


def get_portfolio_project_by_slug(
    slug: str, content_dir: str | None = None
) -> PortfolioProject | None:
    for project in get_all_portfolio_projects(content_dir):
        if project.slug == slug:
            return project
    return None


def get_portfolio_projects_by_category(
    category: str, content_dir: str | None = None
) -> list[PortfolioProject]:
    """Projects whose category matches case-insensitively."""
    wanted = category.lower()
    return [
        p
        for p in get_all_portfolio_projects(content_dir)
        if p.category.lower() == wanted
    ]


def get_portfolio_categories(content_dir: str | None = None) -> list[str]:
    return sorted({p.category for p in get_all_portfolio_projects(content_dir)})


def get_portfolio_tags(content_dir: str | None = None) -> list[str]:
    return sorted(
        {tag for p in get_all_portfolio_projects(content_dir) for tag in p.tags}
    )


# ---------------------------------------------------------------------------
# Testimonials
# ---------------------------------------------------------------------------


def get_all_testimonials(content_dir: str | None = None) -> list[Testimonial]:
    """All testimonials, featured first, then highest rating first."""
    testimonials = load_collection(
        _content_root(content_dir) / "testimonials", Testimonial
    )
    return sorted(testimonials, key=lambda t: (not t.featured, -t.rating))


def get_featured_testimonials(content_dir: str | None = None) -> list[Testimonial]:
    return [t for t in get_all_testimonials(content_dir) if t.featured]


def get_testimonial_by_slug(
    slug: str, content_dir: str | None = None
) -> Testimonial | None:
    for testimonial in get_all_testimonials(content_dir):
        if testimonial.slug == slug:
            return testimonial
    return None
