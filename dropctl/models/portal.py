"""Wire models for the portal HTTP API."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import BaseModel


class ConflictPolicy(str, Enum):
    """How the server resolves a destination file that already exists."""

    OVERWRITE = "overwrite"
    AUTORENAME = "autorename"

    @property
    def verb(self) -> str:
        """Past participle used when describing a resolved conflict."""
        return "auto-renamed" if self is ConflictPolicy.AUTORENAME else "overwritten"


class ClaimPolicy(BaseModel):
    """Policy flags as sent by the server."""

    overwrite: bool = False
    autorename: bool = False

    def resolve(self) -> ConflictPolicy:
        """Overwrite unless the server explicitly signals autorename."""
        return ConflictPolicy.AUTORENAME if self.autorename else ConflictPolicy.OVERWRITE


def resolve_policy(flags: Optional[ClaimPolicy]) -> ConflictPolicy:
    """Conflict policy for server flags that may be missing or null."""
    return flags.resolve() if flags is not None else ConflictPolicy.OVERWRITE


class ClaimResponse(BaseModel):
    """Reply to a successful claim."""

    portal_id: str = ""
    client_token: str
    expires_at: Optional[str] = None
    policy: Optional[ClaimPolicy] = None
    reusable: Optional[bool] = None


class PortalInfo(BaseModel):
    """Public portal metadata, readable without a token."""

    portal_id: str
    expires_at: Optional[str] = None
    policy: Optional[ClaimPolicy] = None
    reusable: bool = True

    @classmethod
    def table_columns(cls) -> list[str]:
        """Return columns for table output."""
        return ["portal_id", "expires_at", "policy", "reusable"]

    def to_row(self, columns: list[str] | None = None) -> dict[str, str]:
        """Convert to row for table output."""
        cols = columns or self.table_columns()
        data = self.to_dict()
        data["policy"] = resolve_policy(self.policy).value
        return {col: str(data.get(col, "")) for col in cols}


class PreflightItem(BaseModel):
    """One candidate file sent for conflict checking."""

    relpath: str
    size: int


class PreflightConflict(BaseModel):
    """A candidate that collides with an existing destination file."""

    relpath: str
    reason: str = ""


class PreflightResponse(BaseModel):
    """Reply to a preflight request."""

    total_files: Optional[int] = None
    total_bytes: Optional[int] = None
    conflicts: list[PreflightConflict] = Field(default_factory=list)


class InitUploadRequest(BaseModel):
    """Request for a transfer slot."""

    upload_id: str
    relpath: str
    size: int
    client_sha256: Optional[str] = None
    policy: ConflictPolicy

    def to_payload(self) -> dict:
        """JSON body; ``client_sha256`` is sent as null when unset."""
        return self.model_dump(mode="json")


class InitUploadResponse(BaseModel):
    """Transfer slot granted by the server."""

    upload_id: Optional[str] = None
    put_url: str


class UploadCommitResponse(BaseModel):
    """Reply to a successful byte transfer."""

    status: Optional[str] = None
    relpath: Optional[str] = None
    server_sha256: Optional[str] = None
    bytes_received: Optional[int] = None
    final_relpath: Optional[str] = None
