# API routes

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from src.api.dependencies import Identity, get_converter, get_current_user, get_store, require_user
from src.common.logging_config import get_structured_logger
from src.common.metrics import files_stored_total
from src.config.settings import get_settings
from src.convert.converter import ConversionTarget, JsonConverter
from src.convert.errors import InvalidInput, JsonConversionError
from src.storage.adapter import FileNotFoundInStore, FileStore, StorageError

router = APIRouter()
logger = get_structured_logger(__name__)

CONVERSION_CATEGORY = "conversion"


class AnalyzeRequest(BaseModel):
    data: Any


class ConvertRequest(BaseModel):
    data: Any
    name: Optional[str] = None
    target: ConversionTarget = ConversionTarget.BOTH
    include_sql: bool = True
    save: bool = False


class FileResponse(BaseModel):
    file_id: str
    owner: str
    filename: str
    category: str
    size_bytes: int
    content_type: str
    uploaded_at: str
    metadata: Dict[str, Any]


def _check_payload_size(data: Any) -> None:
    size = len(json.dumps(data, separators=(",", ":")).encode())
    limit = get_settings().max_payload_bytes
    if size > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Payload of {size} bytes exceeds the {limit} byte limit",
        )


def _storage_failure(e: StorageError) -> HTTPException:
    if isinstance(e, FileNotFoundInStore):
        return HTTPException(status_code=404, detail="File not found")
    logger.error("Storage operation failed", error=str(e))
    return HTTPException(status_code=500, detail=f"Storage error: {e}")


@router.post("/analyze")
def analyze(
    request: AnalyzeRequest,
    converter: JsonConverter = Depends(get_converter),
):
    """
    Classify the structure of a JSON value.

    Returns depth, flat/nested/relational flags, complexity and the
    recommended target model (sql, nosql or both).
    """
    _check_payload_size(request.data)
    try:
        return converter.analyze(request.data).to_dict()
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/convert")
def convert(
    request: ConvertRequest,
    identity: Optional[Identity] = Depends(get_current_user),
    converter: JsonConverter = Depends(get_converter),
    store: FileStore = Depends(get_store),
):
    """
    Convert a JSON value to relational and/or document models.

    - **data**: any JSON value
    - **name**: root table / collection name
    - **target**: sql, nosql or both
    - **include_sql**: render CREATE TABLE and INSERT text
    - **save**: store the result in the caller's files (requires X-User)
    """
    if request.save and identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required to save conversions",
        )
    _check_payload_size(request.data)

    try:
        result = converter.convert(
            request.data,
            name=request.name,
            target=request.target,
            include_sql=request.include_sql,
        )
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except JsonConversionError as e:
        raise HTTPException(status_code=500, detail=str(e))

    body = result.to_dict()
    body["file_id"] = None

    if request.save:
        name = request.name or "conversion"
        try:
            body["file_id"] = store.store(
                identity.username,
                json.dumps(body).encode("utf-8"),
                filename=f"{name}.json",
                category=CONVERSION_CATEGORY,
                metadata={
                    "name": name,
                    "target": request.target.value,
                    "kind": result.analysis.kind,
                    "recommendation": result.analysis.recommendation.value,
                    "item_count": result.analysis.item_count,
                },
            )
        except StorageError as e:
            raise _storage_failure(e)
        files_stored_total.labels(category=CONVERSION_CATEGORY).inc()
        logger.info("Stored conversion", file_id=body["file_id"])

    return body


@router.get("/files", response_model=List[FileResponse])
def list_files(
    identity: Identity = Depends(require_user),
    store: FileStore = Depends(get_store),
):
    """List the caller's stored files, newest first."""
    try:
        return [record.to_dict() for record in store.list_files(identity.username)]
    except StorageError as e:
        raise _storage_failure(e)


@router.get("/files/search", response_model=List[FileResponse])
def search_files(
    q: str = Query(..., description="Text matched against filename, category and metadata"),
    identity: Identity = Depends(require_user),
    store: FileStore = Depends(get_store),
):
    """Search the caller's stored files."""
    try:
        return [record.to_dict() for record in store.search_files(identity.username, q)]
    except StorageError as e:
        raise _storage_failure(e)


@router.get("/files/{file_id}")
def get_file(
    file_id: str,
    identity: Identity = Depends(require_user),
    store: FileStore = Depends(get_store),
):
    """Get a stored file's record and contents."""
    try:
        record = store.get_file(identity.username, file_id)
        raw = store.read_file(identity.username, file_id)
    except StorageError as e:
        raise _storage_failure(e)

    if record.content_type == "application/json":
        try:
            content = json.loads(raw)
        except ValueError as e:
            raise _storage_failure(
                StorageError(f"Corrupt contents in file {file_id}: {e}"))
    else:
        content = raw.decode("utf-8", errors="replace")
    return {"record": record.to_dict(), "content": content}


@router.delete("/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    file_id: str,
    identity: Identity = Depends(require_user),
    store: FileStore = Depends(get_store),
):
    """Delete one of the caller's files."""
    try:
        store.delete_file(identity.username, file_id)
    except StorageError as e:
        raise _storage_failure(e)
    logger.info("Deleted file", file_id=file_id)


@router.get("/stats")
def storage_stats(
    identity: Identity = Depends(require_user),
    store: FileStore = Depends(get_store),
):
    """File count and size totals for the caller."""
    try:
        return store.get_storage_stats(identity.username)
    except StorageError as e:
        raise _storage_failure(e)


@router.get("/export")
def export_files(
    identity: Identity = Depends(require_user),
    store: FileStore = Depends(get_store),
):
    """Export the caller's file records as one JSON document."""
    try:
        records = store.list_files(identity.username)
    except StorageError as e:
        raise _storage_failure(e)

    return {
        "export_date": datetime.now(timezone.utc).isoformat(),
        "username": identity.username,
        "total_files": len(records),
        "files": [record.to_dict() for record in records],
    }
