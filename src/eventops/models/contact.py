"""Pydantic models for contact import rows and reports."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CsvContactRow(BaseModel):
    """One normalized import row. Unknown columns are dropped."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    full_name: str = Field(..., min_length=1, max_length=200)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    email: str | None = Field(None, max_length=320, pattern=_EMAIL_PATTERN)
    phone: str | None = Field(None, max_length=50)
    company: str | None = Field(None, max_length=200)
    title: str | None = Field(None, max_length=200)
    linkedin_url: str | None = Field(None, max_length=500)
    tags: str | None = None
    notes: str | None = Field(None, max_length=5000)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def parsed_tags(self) -> list[str]:
        """Split the comma-separated tags column, dropping blanks."""
        if not self.tags:
            return []
        return [t.strip() for t in self.tags.split(",") if t.strip()]


class RowValidation(BaseModel):
    """Tagged per-row validation outcome."""

    kind: Literal["valid", "invalid"]
    row: int
    value: CsvContactRow | None = None
    error: str | None = None


class RowError(BaseModel):
    row: int
    error: str


class ImportResult(BaseModel):
    imported: int = 0
    skipped: int = 0
    errors: list[RowError] = Field(default_factory=list)


class ImportContactsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rows: list[dict]


class ImportContactsResponse(ImportResult):
    message: str
