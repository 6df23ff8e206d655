"""File API endpoints.

Exposes FetchFile, StoreFile and DeleteFile over HTTP. Query parameters
are the named request parameters; the raw request body is the payload.

Endpoints:
    GET /api/v1/files - Fetch a file by id or by path and name
    PUT /api/v1/files - Store (create or replace) a file
    DELETE /api/v1/files - Delete a file by id or by path and name

Examples:
    >>> # Store a file
    >>> PUT /api/v1/files?path=/docs/2024&name=report.pdf&type=application/pdf
    >>> <37 bytes>
    >>>
    >>> # Response
    >>> {"id": 1, "created": true}

Tests:
    - tests/integration/test_api_files.py
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from filestore.database import get_db_session
from filestore.handlers import FileService, get_file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


# Request/Response Models


class StoreResponse(BaseModel):
    """Response after storing a file.

    Attributes:
        id: Id of the stored file (existing id when replaced)
        created: False when an existing file was replaced
    """

    id: int
    created: bool


class DeleteResponse(BaseModel):
    """Response after deleting a file."""

    deleted: bool = True
    id: int | None = None
    path: str
    name: str
    rows: int = Field(description="Catalog rows removed")
    warnings: list[str] = Field(default_factory=list)


def _params(**values: str | None) -> dict[str, str]:
    return {key: value for key, value in values.items() if value is not None}


async def _read_payload(request: Request, service: FileService) -> bytes:
    """Read the request body, stopping as soon as it passes the size limit."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit():
        service.check_content_size(int(declared))

    payload = bytearray()
    async for chunk in request.stream():
        payload.extend(chunk)
        service.check_content_size(len(payload))
    return bytes(payload)


# Endpoints


@router.get("")
async def fetch_file(
    id: str | None = Query(default=None, description="File id"),
    path: str | None = Query(default=None, description="Logical path"),
    name: str | None = Query(default=None, description="File name"),
    session: AsyncSession = Depends(get_db_session),
    service: FileService = Depends(get_file_service),
) -> Response:
    """Fetch a stored file.

    The body is the file content with the stored type, unchanged, as
    Content-Type; metadata is returned in X-File-* headers (path and name
    URL-quoted).
    """
    fetched = await service.fetch_file(session, _params(id=id, path=path, name=name))
    entry = fetched.entry

    return Response(
        content=fetched.content,
        headers={
            # Stored type, verbatim
            "Content-Type": entry.type,
            "X-File-Id": str(entry.id),
            "X-File-Path": quote(entry.path),
            "X-File-Name": quote(entry.name),
            "X-File-Size": str(entry.size),
        },
    )


@router.put("", response_model=StoreResponse)
async def store_file(
    request: Request,
    path: str | None = Query(default=None, description="Logical path"),
    name: str | None = Query(default=None, description="File name"),
    type: str | None = Query(default=None, description="Content type"),
    session: AsyncSession = Depends(get_db_session),
    service: FileService = Depends(get_file_service),
) -> StoreResponse:
    """Store the request body at (path, name), replacing any existing file."""
    payload = await _read_payload(request, service)
    stored = await service.store_file(
        session,
        _params(path=path, name=name, type=type),
        payload,
    )
    return StoreResponse(id=stored.id, created=stored.created)


@router.delete("", response_model=DeleteResponse)
async def delete_file(
    id: str | None = Query(default=None, description="File id"),
    path: str | None = Query(default=None, description="Logical path"),
    name: str | None = Query(default=None, description="File name"),
    session: AsyncSession = Depends(get_db_session),
    service: FileService = Depends(get_file_service),
) -> DeleteResponse:
    """Delete a file and its catalog entry.

    Filesystem problems do not fail the request; they are listed in
    ``warnings``.
    """
    deleted = await service.delete_file(session, _params(id=id, path=path, name=name))
    return DeleteResponse(
        id=deleted.id,
        path=deleted.path,
        name=deleted.name,
        rows=deleted.rows,
        warnings=deleted.warnings,
    )
