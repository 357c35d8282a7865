# Pydantic data models: Diagnostic (engine output, offsets) and Finding/Location (host view, line/column).

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

SOURCE_TAG = "sec-buddy"


class Diagnostic(BaseModel):
    """
    A positioned finding produced by the engine.

    The span is a half-open range of character offsets [start_offset, end_offset)
    into the scanned text; turning it into line/column is the host's job.
    """

    model_config = ConfigDict(frozen=True)

    start_offset: int = Field(..., ge=0)
    end_offset: int = Field(..., ge=0)
    message: str
    rule_id: str
    severity: Literal["warning"] = "warning"
    source: Literal["sec-buddy"] = SOURCE_TAG

    @model_validator(mode="after")
    def _check_span(self) -> "Diagnostic":
        if self.end_offset < self.start_offset:
            raise ValueError("end_offset must not be before start_offset")
        return self


class Location(BaseModel):
    """Where in the source a finding was reported (file, line, column)."""

    path: Path
    line: int = Field(..., ge=1, description="1-based line number")
    column: int = Field(..., ge=1, description="1-based column number")
    end_line: Optional[int] = Field(None, ge=1)
    end_column: Optional[int] = Field(None, ge=1)
    snippet: Optional[str] = None

    model_config = {"arbitrary_types_allowed": True}


class Finding(BaseModel):
    """A diagnostic resolved against its file, ready for reporting."""

    rule_id: str
    message: str
    location: Location
    severity: Literal["warning"] = "warning"
    source: Literal["sec-buddy"] = SOURCE_TAG

    model_config = {"arbitrary_types_allowed": True}
