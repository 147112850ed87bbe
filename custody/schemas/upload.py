from __future__ import annotations

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Location of an uploaded receipt or transfer proof."""

    url: str
    path: str
