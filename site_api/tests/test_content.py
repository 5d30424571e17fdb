"""Tests for the front-matter content store."""

import os
import textwrap
from pathlib import Path

import pytest

from site_api.models import content as content_models
from site_api.services.content import (
    get_all_portfolio_projects,
    get_all_testimonials,
    get_featured_portfolio_projects,
    get_featured_testimonials,
    get_portfolio_categories,
    get_portfolio_project_by_slug,
    get_portfolio_projects_by_category,
    get_portfolio_tags,
    get_testimonial_by_slug,
    load_collection,
    parse_front_matter,
)

Project = content_models.PortfolioProject


def _write(path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")


def _project(path, title, *, year, featured=False, category="Wedding", tags=()):
    lines = [
        "---",
        f"title: {title}",
        f"category: {category}",
        f"year: {year}",
        f"featured: {str(featured).lower()}",
        "tags:" + "".join(f"\n  - {t}" for t in tags) if tags else "tags: []",
        "---",
        f"Body of {title}.",
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture
def content_dir(tmp_path):
    portfolio = tmp_path / "portfolio"
    _project(portfolio / "old.mdx", "Old", year=2019, tags=["drone"])
    _project(portfolio / "new.mdx", "New", year=2024, category="Corporate Film")
    _project(
        portfolio / "featured-old.mdx",
        "Featured Old",
        year=2020,
        featured=True,
        tags=["cinematic", "drone"],
    )
    _project(portfolio / "featured-new.md", "Featured New", year=2023, featured=True)

    testimonials = tmp_path / "testimonials"
    for slug, rating, featured in [("a", 3, False), ("b", 5, False), ("c", 4, True)]:
        _write(
            testimonials / f"{slug}.mdx",
            f"""
            ---
            name: Client {slug.upper()}
            rating: {rating}
            featured: {str(featured).lower()}
            ---
            Great work.
            """,
        )
    return str(tmp_path)


def test_parse_front_matter_splits_data_and_body():
    data, body = parse_front_matter("---\ntitle: Hello\nyear: 2024\n---\nBody text\n")
    assert data == {"title": "Hello", "year": 2024}
    assert body == "Body text\n"


def test_parse_front_matter_without_block_returns_whole_text():
    assert parse_front_matter("Just text") == ({}, "Just text")


def test_parse_front_matter_rejects_invalid_yaml():
    with pytest.raises(ValueError):
        parse_front_matter("---\ntitle: [unclosed\n---\nBody")


def test_parse_front_matter_rejects_non_mapping():
    with pytest.raises(ValueError):
        parse_front_matter("---\n- a\n- b\n---\nBody")


def test_year_is_kept_as_text(content_dir):
    project = get_portfolio_project_by_slug("old", content_dir)
    assert project.year == "2019"
    assert project.content.strip() == "Body of Old."


def test_portfolio_sorted_featured_first_then_newest(content_dir):
    slugs = [p.slug for p in get_all_portfolio_projects(content_dir)]
    assert slugs == ["featured-new", "featured-old", "new", "old"]


def test_featured_projects(content_dir):
    featured = get_featured_portfolio_projects(content_dir)
    assert [p.slug for p in featured] == ["featured-new", "featured-old"]


def test_project_by_slug_missing_returns_none(content_dir):
    assert get_portfolio_project_by_slug("nope", content_dir) is None


def test_projects_by_category_is_case_insensitive(content_dir):
    projects = get_portfolio_projects_by_category("corporate film", content_dir)
    assert [p.slug for p in projects] == ["new"]


def test_categories_and_tags_are_unique_and_sorted(content_dir):
    assert get_portfolio_categories(content_dir) == ["Corporate Film", "Wedding"]
    assert get_portfolio_tags(content_dir) == ["cinematic", "drone"]


def test_testimonials_sorted_featured_first_then_rating(content_dir):
    slugs = [t.slug for t in get_all_testimonials(content_dir)]
    assert slugs == ["c", "b", "a"]
    assert [t.slug for t in get_featured_testimonials(content_dir)] == ["c"]
    assert get_testimonial_by_slug("b", content_dir).rating == 5


def test_invalid_document_is_skipped(tmp_path, caplog):
    _write(tmp_path / "good.mdx", "---\ntitle: Good\n---\nok\n")
    _write(tmp_path / "bad.mdx", "---\ncategory: Missing title\n---\nok\n")
    _write(tmp_path / "notes.txt", "ignored")

    projects = load_collection(tmp_path, Project)

    assert [p.slug for p in projects] == ["good"]
    assert "bad.mdx" in caplog.text


def test_missing_directory_is_empty(tmp_path):
    assert load_collection(tmp_path / "absent", content_models.Testimonial) == []


def test_collection_reloads_when_file_changes(tmp_path):
    path = tmp_path / "one.mdx"
    _write(path, "---\ntitle: First\n---\n")
    assert load_collection(tmp_path, Project)[0].title == "First"

    _write(path, "---\ntitle: Second\n---\n")
    stat = path.stat()
    os.utime(path, (stat.st_atime, stat.st_mtime + 10))

    assert load_collection(tmp_path, Project)[0].title == "Second"


def test_repository_content_loads():
    repo_content = Path(__file__).resolve().parents[2] / "content"

    projects = get_all_portfolio_projects(str(repo_content))
    testimonials = get_all_testimonials(str(repo_content))
    assert len(projects) == 4
    assert projects[0].featured
    assert len(testimonials) == 2
