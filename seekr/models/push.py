"""Push message models."""

from typing import Dict

from pydantic import BaseModel, Field

NEW_REVIEW_TITLE = "New review!"


class PushNotification(BaseModel):
    """Display block shown by the device OS."""

    title: str
    body: str


class PushMessage(BaseModel):
    """A single push message addressed to one device token."""

    token: str = Field(..., description="Device registration token")
    notification: PushNotification
    data: Dict[str, str] = Field(default_factory=dict, description="Deep-link payload")

    @classmethod
    def for_review(
        cls,
        token: str,
        hunt_title: str,
        comment: str,
        hunt_id: str,
        review_id: str,
    ) -> "PushMessage":
        """Build the message announcing a new review to the hunt's owner."""
        return cls(
            token=token,
            notification=PushNotification(
                title=NEW_REVIEW_TITLE,
                body=f"Your hunt '{hunt_title}' received a new review: {comment}",
            ),
            data={"huntId": hunt_id, "reviewId": review_id},
        )
