"""
Pydantic schemas passed between the crawler and the roast prompt builder.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageContent(BaseModel):
    """Normalized summary of a web page, ready to go into a roast prompt.

    Every acquisition returns one of these, either extracted from real HTML
    or synthesised from the URL when nothing usable could be fetched.
    """

    model_config = ConfigDict(frozen=True)

    source_url: str = Field(default="", description="URL the content was acquired for")
    title: str | None = Field(None, description="Page title, trimmed")
    description: str | None = Field(None, description="Meta description, trimmed")
    headings: tuple[str, ...] = Field(
        default_factory=tuple, description="Up to 10 headings in h1, h2, h3 priority order"
    )
    body_summary: str = Field(
        default="", description="Joined leading paragraphs, at most 500 chars plus '...'"
    )

    def to_prompt_dict(self) -> dict[str, Any]:
        """Fields consumed by the prompt builder, without any rewording."""
        return {
            "url": self.source_url,
            "title": self.title,
            "description": self.description,
            "headings": list(self.headings),
            "body_summary": self.body_summary,
        }
