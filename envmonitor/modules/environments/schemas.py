from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError
from typing import Any, Dict, Optional
from datetime import datetime

from envmonitor.modules.environments.models import ENVIRONMENT_STATUSES, EnvironmentStatus

REQUIRED_MESSAGE = "URL and status are required"
INVALID_STATUS_MESSAGE = "Invalid status value"
EMPTY_URL_MESSAGE = "URL cannot be empty"


def _blank_to_none(value: Any) -> Any:
    # "" is not a distinct state; unset optional fields are always None
    if isinstance(value, str) and value == "":
        return None
    return value


def _check_status(value: Any) -> Any:
    if value not in ENVIRONMENT_STATUSES:
        raise PydanticCustomError("invalid_status", INVALID_STATUS_MESSAGE)
    return value


class EnvironmentCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    url: str
    version: Optional[str] = None
    status: EnvironmentStatus
    notes: Optional[str] = None

    @field_validator("name", "version", "notes", mode="before")
    @classmethod
    def normalize_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("url", mode="before")
    @classmethod
    def require_url(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            raise PydanticCustomError("required", REQUIRED_MESSAGE)
        return value

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, value: Any) -> Any:
        if value is None:
            raise PydanticCustomError("required", REQUIRED_MESSAGE)
        return _check_status(value)


class EnvironmentUpdate(BaseModel):
    """Partial update: only the fields present in the body are applied.

    A field sent as null (or "") clears it; a field left out keeps its value.
    url and status can be changed but never cleared.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    url: Optional[str] = None
    version: Optional[str] = None
    status: Optional[EnvironmentStatus] = None
    notes: Optional[str] = None

    @field_validator("name", "version", "notes", mode="before")
    @classmethod
    def normalize_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("url", mode="before")
    @classmethod
    def require_url(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            raise PydanticCustomError("empty_url", EMPTY_URL_MESSAGE)
        return value

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, value: Any) -> Any:
        return _check_status(value)

    def to_changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class EnvironmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: Optional[str] = None
    url: str
    version: Optional[str] = None
    status: EnvironmentStatus
    notes: Optional[str] = None
    last_updated: datetime = Field(
        validation_alias=AliasChoices("lastUpdated", "last_updated"),
        serialization_alias="lastUpdated",
    )


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
