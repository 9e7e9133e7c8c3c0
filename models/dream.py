from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    # Stored blobs use camelCase keys (isFavorite, customLabels, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self):
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class Analysis(_Record):
    """Interpretation of a dream as returned by the analysis model."""

    title: str
    summary: str
    interpretation: str
    mood: str
    sentiment_score: int = Field(ge=0, le=100)
    tags: List[str] = Field(default_factory=list)
    color_hex: str

    @field_validator('sentiment_score', mode='before')
    @classmethod
    def round_score(cls, value):
        if isinstance(value, float):
            return round(value)
        return value


class Dream(_Record):
    id: str
    date: datetime
    content: str
    analysis: Optional[Analysis] = None
    image_url: Optional[str] = None
    is_favorite: bool = False
    is_lucid: bool = False
    custom_labels: List[str] = Field(default_factory=list)
    section_id: Optional[str] = None

    @field_validator('date')
    @classmethod
    def assume_utc(cls, value):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator('custom_labels')
    @classmethod
    def unique_labels(cls, value):
        return merge_labels([], value)

    def __repr__(self):
        return f'<Dream {self.id}>'


class Collection(_Record):
    id: str
    name: str = Field(min_length=1)

    def __repr__(self):
        return f'<Collection {self.name}>'


def merge_labels(existing, incoming):
    """Append labels to ``existing`` skipping blanks and exact duplicates."""
    labels = list(existing)
    for label in incoming:
        label = label.strip()
        if label and label not in labels:
            labels.append(label)
    return labels


def utcnow():
    return datetime.now(timezone.utc)
