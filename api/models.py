"""Connection domain models — Pydantic + SQLModel."""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from sqlmodel import Column, Field as SQLField, SQLModel, JSON


# ── Auth variants ──────────────────────────────────────────────────────

class NoAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["none"] = "none"


class BasicAuth(BaseModel):
    """Username/password auth. Missing credentials send no Authorization header."""

    model_config = ConfigDict(frozen=True)

    type: Literal["basic"] = "basic"
    username: Optional[str] = None
    password: Optional[str] = None


class ApiKeyAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["apiKey"] = "apiKey"
    api_key: Optional[str] = None


AuthVariant = Annotated[
    Union[NoAuth, BasicAuth, ApiKeyAuth],
    Field(discriminator="type"),
]


# ── Connection descriptor ─────────────────────────────────────────────

class ConnectionDescriptor(BaseModel):
    """Identifies one cluster endpoint and how to authenticate to it."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(default="")
    host: str = Field(..., min_length=1, examples=["localhost"])
    port: int = Field(default=9200, ge=1, le=65535)
    ssl: bool = Field(default=False, description="Use https instead of http")
    auth: AuthVariant = Field(default_factory=NoAuth)

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_auth(cls, data):
        """Accept the flat form: auth_type + username/password/api_key at top level."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("ssl") is None:
            data.pop("ssl", None)
        username = data.pop("username", None)
        password = data.pop("password", None)
        api_key = data.pop("api_key", None)
        auth_type = data.pop("auth_type", None)
        if "auth" in data or auth_type is None:
            return data
        if auth_type == "basic":
            data["auth"] = {"type": "basic", "username": username, "password": password}
        elif auth_type == "apiKey":
            data["auth"] = {"type": "apiKey", "api_key": api_key}
        else:
            data["auth"] = {"type": auth_type}
        return data

    @property
    def base_url(self) -> str:
        scheme = "https" if self.ssl else "http"
        return f"{scheme}://{self.host}:{self.port}"


# ── SQLModel table ────────────────────────────────────────────────────

class ConnectionProfile(SQLModel, table=True):
    __tablename__ = "connection_profiles"

    id: str = SQLField(default_factory=lambda: uuid4().hex, primary_key=True)
    name: str = SQLField(index=True)
    host: str
    port: int = SQLField(default=9200)
    ssl: bool = SQLField(default=False)

    # Auth variant stored as a JSON column
    auth: dict = SQLField(default={}, sa_column=Column(JSON))

    created_at: datetime = SQLField(default_factory=datetime.utcnow)
    updated_at: datetime = SQLField(default_factory=datetime.utcnow)


# ── API schemas (request / response) ─────────────────────────────────

class ProfileCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    host: str = Field(..., min_length=1)
    port: int = Field(default=9200, ge=1, le=65535)
    ssl: bool = False
    auth: AuthVariant = Field(default_factory=NoAuth)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    host: Optional[str] = Field(default=None, min_length=1)
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    ssl: Optional[bool] = None
    auth: Optional[AuthVariant] = None


class ProfileResponse(BaseModel):
    id: str
    name: str
    host: str
    port: int
    ssl: bool
    auth: AuthVariant
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_db(cls, profile: ConnectionProfile) -> "ProfileResponse":
        return cls(
            id=profile.id,
            name=profile.name,
            host=profile.host,
            port=profile.port,
            ssl=profile.ssl,
            auth=profile.auth or {"type": "none"},
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )

    def to_descriptor(self) -> ConnectionDescriptor:
        return ConnectionDescriptor(
            id=self.id,
            name=self.name,
            host=self.host,
            port=self.port,
            ssl=self.ssl,
            auth=self.auth,
        )
