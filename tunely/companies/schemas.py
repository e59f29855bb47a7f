"""Request bodies accepted by the company routes."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterCompanyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    corp_code: str = Field(alias="corpCode", pattern=r"^\d{8}$")
    corp_name: str = Field(alias="corpName", min_length=1, max_length=100)
    stock_code: str | None = Field(
        default=None, alias="stockCode", pattern=r"^[0-9A-Z]{6}$"
    )

    @field_validator("stock_code", mode="before")
    @classmethod
    def _blank_stock_code(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value
