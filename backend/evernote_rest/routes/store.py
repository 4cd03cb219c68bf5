"""
Evernote REST — Store Operation Route
=======================================

What:  POST /{store_name}/{method_name} runs one NoteStore/UserStore operation.
How:   Resolves the store handle for this request (token + store URL from
       headers/config), hands it to the Dispatcher together with the JSON
       body, and returns the operation's result as JSON.

Example:
    POST /noteStore/getNote
    evernote-rest-accesstoken: S=s1:U=...
    {"guid": "abc123", "withContent": true}

    → 200 {"guid": "abc123", "title": "...", "content": "<en-note>...</en-note>", ...}

The dispatch call blocks on Evernote's HTTP API, so it runs in Starlette's
thread pool instead of on the event loop.
"""

import base64
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from evernote_rest.dispatch import Dispatcher
from evernote_rest.schemas.responses import ErrorResponse
from evernote_rest.services.evernote import EvernoteStores, StoreKind, StoreOperations

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Store Operations"])


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


def get_store_operations(store_name: StoreKind, request: Request) -> StoreOperations:
    """Request-scoped operation target for the store named in the path."""
    return EvernoteStores.from_headers(request.headers).store(store_name)


def _encode_bytes(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def encode_result(result: Any) -> Any:
    """JSON-compatible form of an operation result; bytes become base64."""
    return jsonable_encoder(result, custom_encoder={bytes: _encode_bytes})


@router.post(
    "/{store_name}/{method_name}",
    responses={
        200: {"description": "The operation's return value as JSON"},
        400: {"description": "A JSON field does not fit its parameter type", "model": ErrorResponse},
        401: {"description": "No access token available", "model": ErrorResponse},
        404: {"description": "No such operation on this store", "model": ErrorResponse},
        502: {"description": "The Evernote operation failed", "model": ErrorResponse},
    },
    summary="Invoke a NoteStore or UserStore operation",
    description=(
        "Calls the named Evernote store operation. Keys of the JSON body are "
        "matched to the operation's parameter names; parameters without a key "
        "are passed as null and unknown keys are ignored."
    ),
)
async def invoke_store_operation(
    store_name: StoreKind,
    method_name: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    target: Any = Depends(get_store_operations),
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    logger.info("Dispatching %s.%s", store_name.value, method_name)
    result = await run_in_threadpool(dispatcher.invoke, target, method_name, payload)
    return JSONResponse(content=encode_result(result))
