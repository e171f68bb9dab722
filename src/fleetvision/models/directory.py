"""Vehicle and user models owned by the directory."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from fleetvision.models._base import FleetEnum


class RecordStatus(FleetEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserRole(FleetEnum):
    ADMIN = "admin"
    USER = "user"


class Vehicle(BaseModel):
    """A fleet vehicle that readings can be recorded against."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    id: str
    name: str = Field(min_length=1)
    """Model/display name (e.g. ``"VOLVO FH 540"``)."""
    plate: str = Field(min_length=1)
    """License plate."""
    status: RecordStatus = RecordStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    @property
    def label(self) -> str:
        return f"{self.name} - {self.plate}"


class User(BaseModel):
    """A console user."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    id: str
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    role: UserRole = UserRole.USER
    status: RecordStatus = RecordStatus.ACTIVE
    password: SecretStr | None = Field(default=None, repr=False)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def check_password(self, candidate: str) -> bool:
        if self.password is None:
            return False
        return self.password.get_secret_value() == candidate
