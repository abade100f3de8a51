"""Hunt and profile models read by the notification pipeline."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Hunt(BaseModel):
    """The fields of a hunt document the pipeline relies on."""

    title: str = Field(default="", description="Display title")
    author_id: Optional[str] = Field(default=None, alias="authorId", description="Owning profile ID")

    @field_validator("title", mode="before")
    @classmethod
    def null_title_to_empty(cls, v):
        """Stored hunts may carry an explicit null title."""
        return "" if v is None else v

    class Config:
        populate_by_name = True
        extra = "ignore"


class Author(BaseModel):
    """Author block nested in a profile document."""

    fcm_token: Optional[str] = Field(default=None, alias="fcmToken", description="Push messaging token")

    class Config:
        populate_by_name = True
        extra = "ignore"


class Profile(BaseModel):
    """A user's profile; only the messaging token matters here."""

    author: Optional[Author] = None

    class Config:
        populate_by_name = True
        extra = "ignore"

    @property
    def fcm_token(self) -> Optional[str]:
        """Registered token, or None when absent or blank."""
        if self.author is None or not self.author.fcm_token:
            return None
        return self.author.fcm_token


class TokenRegistration(BaseModel):
    """Request body for registering a refreshed messaging token."""

    token: str = Field(..., min_length=1, description="Token issued by the messaging provider")
