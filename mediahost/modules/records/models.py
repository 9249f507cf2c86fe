"""
Record Models

Application-level tables that store asset URLs. The library only ever
updates existing rows; creating and deleting them belongs to the host
application.
"""

import uuid
from enum import Enum
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware UTC timestamp for record audit columns."""
    return datetime.now(timezone.utc)


class MediaType(str, Enum):
    """Kinds of media a campaign can carry."""
    IMAGE = "image"
    VIDEO = "video"


class CampaignStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class AdCampaign(SQLModel, table=True):
    """Advertising campaign with an uploaded (or placeholder) creative."""
    __tablename__ = "ad_campaigns"

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True
    )

    title: str = Field(min_length=1)
    advertiser: str
    status: CampaignStatus = Field(default=CampaignStatus.PENDING)
    budget: float = Field(default=0.0, ge=0)
    click_url: str = Field(default="https://example.com")

    # Media fields
    media_url: Optional[str] = None
    media_type: MediaType = Field(default=MediaType.IMAGE)
    file_name: Optional[str] = None
    file_size: int = Field(default=0, ge=0)
    cloudinary_public_id: Optional[str] = None
    cloudinary_format: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Article(SQLModel, table=True):
    """Blog article; its featured image lives on the media host."""
    __tablename__ = "articles"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(min_length=1)
    slug: str = Field(index=True)
    featured_image: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
