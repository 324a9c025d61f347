"""Singleton model-image record."""

from typing import Literal

from pydantic import BaseModel

CURRENT_USER_ID = "currentUser"


class UserModel(BaseModel):
    """The user's studio model image."""
    id: Literal["currentUser"] = CURRENT_USER_ID
    image_url: str
