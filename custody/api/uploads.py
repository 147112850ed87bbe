# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import mimetypes
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Query, Request, Response, status

from custody.api.deps import AuthDep, ObjectStoreDep
from custody.exceptions import ValidationError
from custody.models.enums import Role
from custody.schemas.upload import UploadResponse
from custody.services.authorization import require_role
from custody.services.storage import normalize_object_path

uploads_router = APIRouter(prefix="/uploads", tags=["uploads"])

# Which role may upload into each category.
_CATEGORY_ROLES: dict[str, Role] = {
    "receipts": Role.EMPLOYEE,
    "transfer_proofs": Role.GENERAL_MANAGER,
}


@uploads_router.post("/{category}", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    category: Literal["receipts", "transfer_proofs"],
    request: Request,
    auth: AuthDep,
    store: ObjectStoreDep,
    filename: str = Query(min_length=1, max_length=255),
) -> UploadResponse:
    """Store a raw request body and return the URL to reference in a submission or transfer."""
    require_role(auth.role, _CATEGORY_ROLES[category])

    data = await request.body()
    if not data:
        raise ValidationError("Upload body is empty")

    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
    path = normalize_object_path(f"{category}/{auth.user_id}/{stamp}_{filename}")
    url = await store.upload(data, path)
    return UploadResponse(url=url, path=path)


# Mounted by the app factory under the path of ``public_base_url``.
files_router = APIRouter(tags=["uploads"])


@files_router.get("/{path:path}")
async def download_file(path: str, store: ObjectStoreDep) -> Response:
    """Serve a stored receipt or transfer proof at the URL returned by the upload endpoint."""
    key = normalize_object_path(path)
    content = await store.read(key)
    media_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return Response(content=content, media_type=media_type)
