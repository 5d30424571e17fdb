"""Front-matter content models (portfolio projects, testimonials)."""

from typing import Any

from pydantic import BaseModel, field_validator


class PortfolioProject(BaseModel):
    """A portfolio piece parsed from content/portfolio/*.mdx."""

    title: str
    client: str = ""
    category: str = ""
    year: str = ""
    duration: str = ""
    budget: str = ""
    location: str = ""
    description: str = ""
    image: str = ""
    video: str = ""
    tags: list[str] = []
    featured: bool = False
    slug: str
    content: str = ""

    @field_validator("year", "duration", "budget", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        """YAML reads ``year: 2024`` as an int; keep the textual form."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class Testimonial(BaseModel):
    """A client testimonial parsed from content/testimonials/*.mdx."""

    name: str
    role: str = ""
    company: str = ""
    project: str = ""
    rating: int = 5
    featured: bool = False
    image: str = ""
    slug: str
    content: str = ""
