"""Portfolio endpoints backed by front-matter documents."""

from fastapi import APIRouter, HTTPException, Query

from site_api.models.content import PortfolioProject
from site_api.services.content import (
    get_all_portfolio_projects,
    get_featured_portfolio_projects,
    get_portfolio_categories,
    get_portfolio_project_by_slug,
    get_portfolio_projects_by_category,
    get_portfolio_tags,
)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("", response_model=list[PortfolioProject])
async def list_projects(
    category: str | None = Query(
        default=None,
        description="Filter projects by category (case-insensitive)",
    ),
    featured: bool = Query(
        default=False,
        description="Only return featured projects",
    ),
):
    """List portfolio projects, featured first then newest."""
    if category:
        projects = get_portfolio_projects_by_category(category)
    elif featured:
        projects = get_featured_portfolio_projects()
    else:
        projects = get_all_portfolio_projects()

    if category and featured:
        projects = [p for p in projects if p.featured]
    return projects


@router.get("/categories", response_model=list[str])
async def list_categories():
    return get_portfolio_categories()


@router.get("/tags", response_model=list[str])
async def list_tags():
    return get_portfolio_tags()


@router.get("/{slug}", response_model=PortfolioProject)
async def get_project(slug: str):
    """Get a single portfolio project by slug."""
    project = get_portfolio_project_by_slug(slug)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project
