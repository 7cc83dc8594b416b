"""Models module for the app.

This module contains the common base model for records served by the upstream
tobacco management API. The API stores every value as a string and may omit
fields or send ``null``; ``UpstreamRecord`` normalises all of them to strings
so the feature models can expose typed helpers on top."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class UpstreamRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_string(cls, value: Any) -> str:
        """Missing values become ``""``, numbers and booleans their ``str()``."""
        if value is None:
            return ""
        return str(value)
