"""Testimonial endpoints."""

from fastapi import APIRouter, HTTPException, Query

from site_api.models.content import Testimonial
from site_api.services.content import (
    get_all_testimonials,
    get_featured_testimonials,
    get_testimonial_by_slug,
)

router = APIRouter(prefix="/testimonials", tags=["testimonials"])


@router.get("", response_model=list[Testimonial])
async def list_testimonials(
    featured: bool = Query(default=False, description="Only featured testimonials"),
):
    """List testimonials, featured first then highest rated."""
    if featured:
        return get_featured_testimonials()
    return get_all_testimonials()


@router.get("/{slug}", response_model=Testimonial)
async def get_testimonial(slug: str):
    testimonial = get_testimonial_by_slug(slug)
    if not testimonial:
        raise HTTPException(status_code=404, detail="Testimonial not found")
    return testimonial
