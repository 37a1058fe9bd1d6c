"""
Pydantic schemas for request bodies and JSON responses.

Request models are validated at the route boundary through parse_body() /
parse_query(); any pydantic error is turned into an API ValidationError.
The wire format is camelCase, database rows are snake_case, so response
models accept field names and dump by alias.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar, Union, get_args

from flask import request
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from backend import config
from backend.errors import ValidationError

Category = Literal[
    "community-service",
    "environmental",
    "education",
    "healthcare",
    "social-welfare",
    "disaster-relief",
    "other",
]
EventStatus = Literal["draft", "published", "cancelled", "completed"]

CATEGORIES = get_args(Category)

# Keeps (page - 1) * MAX_PAGE_SIZE far inside the bigint OFFSET range
MAX_PAGE = 10_000_000

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiModel(BaseModel):
    """Base for response models and nested objects shared with requests."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, extra="ignore")


def _required_text(value: Any, info: ValidationInfo) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{to_camel(info.field_name)} is required")
    return value.strip() if isinstance(value, str) else value


def _clean_list(values: Any, lower: bool = False) -> Any:
    if not isinstance(values, list):
        return values
    cleaned = []
    for v in values:
        if isinstance(v, str):
            v = v.strip().lower() if lower else v.strip()
            if not v:
                continue
        cleaned.append(v)
    return cleaned


# --- NESTED OBJECTS ---

class SocialLinks(ApiModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    facebook: str = ""
    twitter: str = ""
    linkedin: str = ""
    instagram: str = ""


class EventLocation(ApiModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.address and self.city and self.state)


# --- AUTH REQUESTS ---

class RegisterRequest(RequestModel):
    username: str = Field(min_length=3, max_length=30)
    email: str = Field(max_length=255)
    password: str
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)

    @field_validator("username", "password", mode="before")
    @classmethod
    def _present(cls, v: Any, info: ValidationInfo) -> Any:
        if info.field_name == "password":
            if v is None or v == "":
                raise ValueError("password is required")
            return v
        return _required_text(v, info)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v: Any, info: ValidationInfo) -> Any:
        v = _required_text(v, info)
        return v.lower() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        local, _, domain = v.partition("@")
        if not local or "." not in domain or " " in v:
            raise ValueError("Please provide a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def _password_length(cls, v: str) -> str:
        if len(v) < config.PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {config.PASSWORD_MIN_LENGTH} characters long")
        return v

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _optional_name(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


class LoginRequest(RequestModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v: Any, info: ValidationInfo) -> Any:
        v = _required_text(v, info)
        return v.lower() if isinstance(v, str) else v

    @field_validator("password", mode="before")
    @classmethod
    def _password_present(cls, v: Any) -> Any:
        if v is None or v == "":
            raise ValueError("password is required")
        return v


class ProfileUpdate(RequestModel):
    """
    Editable profile fields. Any other key rejects the whole update.
    Values go through the same length and type rules as the users table.
    """

    model_config = ConfigDict(alias_generator=to_camel, extra="forbid", str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=100)
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    social_links: Optional[SocialLinks] = None
    profile_picture: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _not_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            raise ValueError(f"{to_camel(info.field_name)} cannot be null")
        return v

    @field_validator("skills", "interests", mode="before")
    @classmethod
    def _strip_items(cls, v: Any) -> Any:
        return _clean_list(v)


# --- EVENT REQUESTS ---

class EventCreate(RequestModel):
    model_config = ConfigDict(alias_generator=to_camel, extra="ignore", str_strip_whitespace=True)

    title: str = Field(max_length=200)
    description: str = Field(max_length=2000)
    category: Category
    date: datetime
    time: str = Field(max_length=32)
    location: Optional[EventLocation] = None
    is_virtual: bool = False
    virtual_link: Optional[str] = None
    max_participants: Optional[int] = Field(default=None, ge=1)
    requirements: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("title", "description", "category", "date", "time", mode="before")
    @classmethod
    def _present(cls, v: Any, info: ValidationInfo) -> Any:
        return _required_text(v, info)

    @field_validator("max_participants", mode="before")
    @classmethod
    def _unbounded_when_empty(cls, v: Any) -> Any:
        # 0 / "" / null all mean "no limit"
        if v in (None, "", 0):
            return None
        return v

    @field_validator("is_virtual", mode="before")
    @classmethod
    def _virtual_default(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> Any:
        return [] if v is None else _clean_list(v, lower=True)

    @field_validator("requirements", mode="before")
    @classmethod
    def _normalize_requirements(cls, v: Any) -> Any:
        return [] if v is None else _clean_list(v)

    @model_validator(mode="after")
    def _location_or_link(self) -> "EventCreate":
        if self.is_virtual:
            if not self.virtual_link:
                raise ValueError("Please provide virtual meeting link for virtual events")
            self.location = EventLocation()
        else:
            if self.location is None or not self.location.is_complete():
                raise ValueError("Please provide complete location details for in-person events")
            self.virtual_link = None
        return self


class ListEventsQuery(RequestModel):
    category: Optional[str] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = config.DEFAULT_PAGE_SIZE
    status: EventStatus = "published"

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        if v != "all" and v not in CATEGORIES:
            raise ValueError(f"category must be one of: all, {', '.join(CATEGORIES)}")
        return v

    @field_validator("search", mode="before")
    @classmethod
    def _blank_search(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, v: Any) -> Any:
        return v or "published"

    @field_validator("page", "limit", mode="before")
    @classmethod
    def _positive_int(cls, v: Any, info: ValidationInfo) -> int:
        default = 1 if info.field_name == "page" else config.DEFAULT_PAGE_SIZE
        try:
            n = int(v)
        except (TypeError, ValueError):
            return default
        if n < 1:
            return default
        if info.field_name == "limit":
            return min(n, config.MAX_PAGE_SIZE)
        return min(n, MAX_PAGE)


# --- RESPONSES ---

class UserSummary(ApiModel):
    id: int
    username: str
    first_name: str = ""
    last_name: str = ""
    profile_picture: str = ""


class OrganizerSummary(UserSummary):
    bio: str = ""


class UserOut(UserSummary):
    email: str
    is_verified: bool = False


class UserProfile(UserOut):
    bio: str = ""
    location: str = ""
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    created_at: Optional[datetime] = None


class EventOut(ApiModel):
    id: int
    title: str
    description: str
    category: str
    date: datetime
    time: str
    location: EventLocation = Field(default_factory=EventLocation)
    is_virtual: bool = False
    virtual_link: Optional[str] = None
    organizer: Union[OrganizerSummary, int]
    max_participants: Optional[int] = None
    current_participants: int = 0
    participants: List[Union[UserSummary, int]] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(ApiModel):
    current: int
    pages: int
    total: int


# --- ROW MAPPING ---

def user_from_row(row: Mapping[str, Any], model: Type[ModelT] = UserProfile) -> ModelT:
    """Build a user response model from a users row (or a prefixed join)."""
    data = {k: v for k, v in row.items() if k in model.model_fields}
    data["id"] = row["user_id"]
    if data.get("social_links") is None:
        data.pop("social_links", None)
    return model(**data)


def event_from_row(row: Mapping[str, Any], participants: Optional[List[Mapping[str, Any]]] = None) -> EventOut:
    """
    Build an EventOut from an events row joined with organizer_* columns.

    participants: optional user rows to populate; otherwise the raw id list.
    """
    if row.get("organizer_username") is not None:
        organizer = OrganizerSummary(
            id=row["organizer_id"],
            username=row["organizer_username"],
            first_name=row.get("organizer_first_name") or "",
            last_name=row.get("organizer_last_name") or "",
            profile_picture=row.get("organizer_profile_picture") or "",
            bio=row.get("organizer_bio") or "",
        )
    else:
        organizer = row["organizer_id"]

    if participants is None:
        members: List[Union[UserSummary, int]] = list(row.get("participants") or [])
    else:
        members = [user_from_row(p, UserSummary) for p in participants]

    return EventOut(
        id=row["event_id"],
        title=row["title"],
        description=row["description"],
        category=row["category"],
        date=row["date"],
        time=row["time"],
        location=EventLocation.model_validate(row.get("location") or {}),
        is_virtual=row.get("is_virtual") or False,
        virtual_link=row.get("virtual_link"),
        organizer=organizer,
        max_participants=row.get("max_participants"),
        current_participants=row.get("current_participants") or 0,
        participants=members,
        requirements=list(row.get("requirements") or []),
        tags=list(row.get("tags") or []),
        status=row["status"],
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


# --- BOUNDARY HELPERS ---

def _describe(err: Dict[str, Any]) -> str:
    loc = ".".join(str(p) for p in err.get("loc", ()))
    kind = err.get("type")
    if kind == "missing":
        return f"{loc} is required"
    if kind == "extra_forbidden":
        return f"{loc} is not an editable field"
    if kind == "value_error":
        return str(err["ctx"]["error"])
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def validate(model: Type[ModelT], data: Any) -> ModelT:
    """Validate data against model, raising the API ValidationError on failure."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("; ".join(_describe(err) for err in e.errors())) from None


def parse_body(model: Type[ModelT]) -> ModelT:
    data = request.get_json(silent=True)
    return validate(model, {} if data is None else data)


def parse_query(model: Type[ModelT]) -> ModelT:
    return validate(model, request.args.to_dict())
