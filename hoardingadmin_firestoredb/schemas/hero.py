from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .document import FirestoreDocument

MAIN_HERO_DOCUMENT_ID = "mainHero"

DEFAULT_HERO = {
    "title": "Make Your Brand Unmissable",
    "subtitle": "Premium Outdoor Advertising",
    "tagline": "Premium hoarding and billboard solutions across the city",
    "buttonText": "Search Media",
    "videos": ["/adi.mp4", "/add.mp4", "/addd.mp4"],
}


class HeroContent(FirestoreDocument):
    title: str = DEFAULT_HERO["title"]
    subtitle: str = DEFAULT_HERO["subtitle"]
    tagline: str = DEFAULT_HERO["tagline"]
    button_text: str = DEFAULT_HERO["buttonText"]
    videos: List[str] = Field(default_factory=lambda: list(DEFAULT_HERO["videos"]))
    updated_at: Optional[datetime] = None


class HeroUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    subtitle: Optional[str] = None
    tagline: Optional[str] = None
    button_text: Optional[str] = None
    videos: Optional[List[str]] = None
