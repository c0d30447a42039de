"""Base model for all domain entities."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    """Timezone-aware current time; backend timestamps are always UTC."""
    return datetime.now(timezone.utc)


class DomainModel(BaseModel):
    """Base class for all domain models.

    Entities are immutable: cache mutations replace an entity with an
    updated copy instead of changing it in place.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",  # Backend joins add columns we do not model
        arbitrary_types_allowed=True,
    )
