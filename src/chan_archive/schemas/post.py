"""Post-related Pydantic schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Capcode(str, Enum):
    """Privileged authorship markers as stored in the archive tables."""

    NONE = "N"
    MOD = "M"
    GLOBAL_MOD = "G"
    ADMIN = "A"
    DEVELOPER = "D"


class BoardContext(BaseModel):
    """Per-board information the renderer needs to build links."""

    shortname: str = Field(..., min_length=1, description="Board shortname used in URIs")
    name: str = Field("", description="Human readable board name")
    archive: bool = Field(False, description="Board mirrors an external archive")

    model_config = ConfigDict(frozen=True)


class Post(BaseModel):
    """A stored post as handed to the renderer."""

    num: int = Field(0, ge=0, description="Post number; 0 while previewing")
    subnum: int = Field(0, ge=0, description="Ghost sequence number; 0 for canonical posts")
    thread_num: int = Field(0, ge=0)
    op: bool = False
    timestamp: int = 0
    capcode: Capcode = Capcode.NONE
    name: str | None = None
    trip: str | None = None
    email: str | None = None
    title: str | None = None
    comment: str | None = None
    poster_hash: str | None = None
    poster_country: str | None = None
    poster_country_name: str | None = None
    board: BoardContext | None = None

    model_config = ConfigDict(validate_assignment=True)

    @model_validator(mode="before")
    @classmethod
    def _coerce_legacy_fields(cls, data: object) -> object:
        if not isinstance(data, dict):
            return data
        # Archive rows store the OP flag as 0/1 and the comment may be bytes.
        op = data.get("op")
        if isinstance(op, int) and not isinstance(op, bool):
            data = {**data, "op": bool(op)}
        comment = data.get("comment")
        if isinstance(comment, bytes | bytearray):
            data = {**data, "comment": bytes(comment).decode("utf-8", errors="ignore")}
        return data

    @property
    def is_ghost(self) -> bool:
        return self.subnum != 0

    @property
    def token(self) -> str:
        """Index form of the post number, ``num`` or ``num,subnum``."""
        return f"{self.num},{self.subnum}" if self.subnum else str(self.num)

    @property
    def anchor_id(self) -> str:
        """Fragment and registry form of the post number, ``num`` or ``num_subnum``."""
        return f"{self.num}_{self.subnum}" if self.subnum else str(self.num)


class RenderedPost(BaseModel):
    """Output of one comment rendering: escaped fields and processed body."""

    num: int
    subnum: int
    thread_num: int
    op: bool
    anchor_id: str
    name_processed: str
    trip_processed: str
    email_processed: str
    title_processed: str
    poster_hash_processed: str
    poster_country_name_processed: str | None
    comment_sanitized: str
    comment_processed: str
    original_timestamp: int
    fourchan_date: str
