from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class Position(BaseModel):
    """Zero-indexed (line, column) supplied by the editor."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int

    @field_validator("line", "column")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("position components must be >= 0")
        return v

    def as_point(self) -> tuple[int, int]:
        return (self.line, self.column)


class Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    def contains(self, position: Position) -> bool:
        """Inclusive on both ends: a cursor sitting on either boundary counts."""
        return self.start.as_point() <= position.as_point() <= self.end.as_point()


class TokenKind(StrEnum):
    NAME = "name"
    VERSION = "version"


class ExtractionResult(BaseModel):
    """Dependency entry found under the cursor."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    version_spec_text: str  # Raw specifier, e.g. "^4.17.1"
    matched_range: Range  # Span of the token the cursor is on
    token_kind: TokenKind
