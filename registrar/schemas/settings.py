"""Pydantic schemas for the website schedule."""

from pydantic import BaseModel, field_validator

from registrar.utils.normalization import parse_hhmm


class WebsiteSettingsUpdate(BaseModel):
    is_open: bool = False
    message: str = ""
    open_time: str = ""
    close_time: str = ""
    auto_schedule: bool = False
    codes_active: bool = True
    post_registration_message: str = ""

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def validate_time(cls, v):
        text = "" if v is None else str(v).strip()
        if text and parse_hhmm(text) is None:
            raise ValueError("Time must be in HH:MM format")
        return text


class ScheduleStatus(BaseModel):
    is_open: bool
    message: str = ""
    open_time: str = ""
    close_time: str = ""
    auto_schedule: bool = False
    codes_active: bool = True
    post_registration_message: str = ""
