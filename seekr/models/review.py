"""Review models for the Seekr review notifier."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Review(BaseModel):
    """A review left on a hunt; the event source for notifications.

    Only the fields the notification pipeline reads are declared, other
    review fields (rating, photos, author) pass through untouched.
    """

    hunt_id: Optional[str] = Field(default=None, alias="huntId", description="Reviewed hunt")
    comment: str = Field(default="", description="Review text")

    @field_validator("comment", mode="before")
    @classmethod
    def null_comment_to_empty(cls, v):
        """A review saved without text still notifies the owner."""
        return "" if v is None else v

    class Config:
        populate_by_name = True
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "huntId": "h1",
                "comment": "Loved it!",
                "authorId": "u2",
                "rating": 4.5,
                "photos": []
            }
        }
