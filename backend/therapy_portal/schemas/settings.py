"""Pydantic models for application configuration settings."""

from pydantic import BaseModel, field_validator


class SettingsRead(BaseModel):
    site_name: str
    require_account_approval: bool
    public_registration_disabled: bool

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    site_name: str | None = None
    require_account_approval: bool | None = None
    public_registration_disabled: bool | None = None

    @field_validator(
        "site_name", "require_account_approval", "public_registration_disabled"
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value
