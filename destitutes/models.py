# destitutes/models.py
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DESCRIPTION_MAX_CHARS = 500
ANONYMOUS_LABEL = "Anonymous"


class GeoPoint(BaseModel):
    latitude: float
    longitude: float

    @property
    def geohash(self) -> str:
        # not a real geohash; the six-decimal "lat,lon" key the feed has always used
        return f"{self.latitude:.6f},{self.longitude:.6f}"

    def display(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"

    def maps_url(self) -> str:
        return f"https://www.google.com/maps?q={self.latitude},{self.longitude}"


@dataclass(frozen=True)
class ImageRef:
    url: str
    path: str


@dataclass(frozen=True)
class ImagePayload:
    """One in-memory image plus what storage needs to know about it."""
    data: bytes
    content_type: str = "image/jpeg"
    filename: str = "captured-photo.jpg"

    @property
    def preview(self) -> bytes:
        # st.image renders raw bytes directly
        return self.data


@dataclass(frozen=True)
class UserSession:
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    provider: str = "password"


class UserProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    email: Optional[str] = None
    username: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    is_profile_complete: bool = Field(default=False, alias="isProfileComplete")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class Post(BaseModel):
    """
    A shared photo. Field aliases are the Firestore document keys.

    owner_id is always stored, is_anonymous only masks the display name.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    owner_id: str = Field(alias="userId")
    owner_email: Optional[str] = Field(default=None, alias="userEmail")
    display_name: str = Field(default=ANONYMOUS_LABEL, alias="username")
    image_url: str = Field(alias="imageURL")
    image_path: str = Field(alias="imagePath")
    location: GeoPoint
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_CHARS)
    is_anonymous: bool = Field(default=False, alias="isAnonymous")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    status: str = "active"
    likes: int = 0
    views: int = 0

    @property
    def image_ref(self) -> ImageRef:
        return ImageRef(url=self.image_url, path=self.image_path)

    @property
    def display_label(self) -> str:
        return ANONYMOUS_LABEL if self.is_anonymous else self.display_name

    def to_document(self) -> dict:
        """Document body without id and timestamps (the database assigns those)."""
        doc = self.model_dump(by_alias=True, exclude={"id", "created_at", "updated_at"})
        doc["location"]["geohash"] = self.location.geohash
        return doc

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Post":
        return cls.model_validate({**data, "id": doc_id})
