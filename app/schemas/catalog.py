"""Category and client reference-data schemas."""

from pydantic import BaseModel


class CategoryResponse(BaseModel):
    slug: str
    name: str
    description: str
    icon: str | None
    sort_order: int
    skill_count: int | None = None

    model_config = {"from_attributes": True}


class ClientResponse(BaseModel):
    slug: str
    name: str
    icon: str | None
    website_url: str | None
    sort_order: int

    model_config = {"from_attributes": True}
