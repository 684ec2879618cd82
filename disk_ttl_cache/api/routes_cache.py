import logging

from fastapi import APIRouter, HTTPException, Request, Response

from disk_ttl_cache.api.schemas import ItemResponse, PutItemRequest, StatusResponse
from disk_ttl_cache.errors import (
    InvalidKeyError,
    InvalidTTLError,
    NotStartedError,
    SerializationError,
)
from disk_ttl_cache.storage import CacheKey, DiskStore

router = APIRouter()
log = logging.getLogger("disk_ttl_cache")


def _check_auth(req: Request):
    settings = req.app.state.settings
    if not settings.require_auth:
        return
    auth = req.headers.get("authorization", "")
    if not auth.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing Authorization Bearer token")
    token = auth.split(" ", 1)[1].strip()
    if token != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def _store_for(request: Request, segment: str) -> DiskStore:
    _check_auth(request)
    store: DiskStore = request.app.state.store
    err = store.validate_segment_name(segment)
    if err is not None:
        raise HTTPException(status_code=400, detail=f"Invalid segment name: {err}")
    return store


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotStartedError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.get("/v1/cache/status", response_model=StatusResponse)
def cache_status(request: Request):
    _check_auth(request)
    store: DiskStore = request.app.state.store
    return StatusResponse(ready=store.is_ready(), cache_path=str(store.cache_path), clean_every=store.clean_every)


@router.get("/v1/cache/{segment}/{item_id:path}", response_model=ItemResponse)
def get_item(segment: str, item_id: str, request: Request):
    store = _store_for(request, segment)
    try:
        entry = store.get(CacheKey(segment=segment, id=item_id))
    except (NotStartedError, InvalidKeyError) as e:
        raise _http_error(e) from e
    if entry is None:
        raise HTTPException(status_code=404, detail="Not found")
    return ItemResponse(segment=segment, id=item_id, item=entry.item, stored=entry.stored, ttl=entry.ttl)


@router.put("/v1/cache/{segment}/{item_id:path}", status_code=204)
def put_item(segment: str, item_id: str, payload: PutItemRequest, request: Request):
    store = _store_for(request, segment)
    ttl = payload.ttl if payload.ttl is not None else request.app.state.settings.default_ttl
    try:
        store.set(CacheKey(segment=segment, id=item_id), payload.item, ttl)
    except (NotStartedError, InvalidKeyError, InvalidTTLError, SerializationError) as e:
        raise _http_error(e) from e
    log.debug("Stored %s/%s ttl=%s", segment, item_id, ttl)
    return Response(status_code=204)


@router.delete("/v1/cache/{segment}/{item_id:path}", status_code=204)
def delete_item(segment: str, item_id: str, request: Request):
    store = _store_for(request, segment)
    try:
        store.drop(CacheKey(segment=segment, id=item_id))
    except (NotStartedError, InvalidKeyError) as e:
        raise _http_error(e) from e
    return Response(status_code=204)
