# src/webpush_testing/apps/api/server.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from webpush_testing.build_info import BUILD_INFO
from webpush_testing.services.push import InvalidParameter, NotificationEngine, NotificationHeaders, PushError
from webpush_testing.services.settings import Settings

_log = logging.getLogger("webpush_testing.api")

router = APIRouter()


class SubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class SubscriptionData(BaseModel):
    endpoint: str
    keys: SubscriptionKeys
    clientHash: str


class SubscribeResponse(BaseModel):
    data: SubscriptionData


class NotificationsData(BaseModel):
    messages: List[str]


class NotificationsResponse(BaseModel):
    data: NotificationsData


def get_engine(request: Request) -> NotificationEngine:
    return request.app.state.engine


async def _read_options(request: Request) -> Dict[str, Any]:
    """Request bodies arrive either as JSON or as an urlencoded form."""
    raw = await request.body()
    if not raw.strip():
        return {}
    content_type = request.headers.get("content-type", "")
    if "json" in content_type:
        try:
            data = json.loads(raw)
        except ValueError:
            raise InvalidParameter("Request body is not valid JSON") from None
        if not isinstance(data, dict):
            raise InvalidParameter("Request body must be an object")
        return data
    try:
        return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
    except UnicodeDecodeError:
        raise InvalidParameter("Request body is not valid UTF-8") from None


@router.post("/status")
async def status() -> Response:
    return Response(status_code=200)


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(request: Request, engine: NotificationEngine = Depends(get_engine)):
    options = await _read_options(request)
    data = await engine.subscribe(options)
    return {"data": data}


@router.post("/notify/{client_hash}", status_code=201)
async def notify(client_hash: str, request: Request, engine: NotificationEngine = Depends(get_engine)) -> Response:
    headers = NotificationHeaders(
        encoding=request.headers.get("content-encoding"),
        ttl=request.headers.get("ttl"),
        authorization=request.headers.get("authorization"),
        encryption=request.headers.get("encryption"),
        crypto_key=request.headers.get("crypto-key"),
    )
    await engine.handle_notification(client_hash, headers, await request.body())
    return Response(status_code=201)


@router.post("/expire-subscription/{client_hash}")
async def expire_subscription(client_hash: str, engine: NotificationEngine = Depends(get_engine)) -> Response:
    engine.expire_subscription(client_hash)
    return Response(status_code=200)


@router.post("/get-notifications", response_model=NotificationsResponse)
async def get_notifications(request: Request, engine: NotificationEngine = Depends(get_engine)):
    body = await _read_options(request)
    return {"data": engine.get_notifications(body)}


async def _push_error_handler(request: Request, exc: PushError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"message": exc.message, "code": exc.error_code}},
    )


def create_app(engine: Optional[NotificationEngine] = None, *, settings: Optional[Settings] = None) -> FastAPI:
    """Build the HTTP transport around one engine instance.

    When no engine is given a fresh one is created whose endpoints point at
    ``settings.notify_url``.
    """
    if engine is None:
        settings = settings or Settings.from_sources()
        engine = NotificationEngine(notify_url=settings.notify_url)
    elif settings is not None and not engine.notify_url:
        engine.notify_url = settings.notify_url

    app = FastAPI(title="web-push-testing", version=BUILD_INFO.version)
    app.state.engine = engine
    app.include_router(router)
    app.add_exception_handler(PushError, _push_error_handler)
    _log.debug("api ready, notify url %s", engine.notify_url)
    return app
