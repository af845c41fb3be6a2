# src/gitconfig_server/routers/config_router.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..middleware.auth import require_basic_auth
from ..registry import Environment
from ..services import ConfigService
from .deps import get_environment, get_service

router = APIRouter(tags=["config"], dependencies=[Depends(require_basic_auth)])


@router.get("/{env}/{application}/{profile}/{label}")
async def config_at_label(
    application: str,
    profile: str,
    label: str,
    environment: Environment = Depends(get_environment),
    svc: ConfigService = Depends(get_service),
):
    body = await svc.environment_response(environment, application, profile, label)
    return JSONResponse(body.to_json())


@router.get("/{env}/{application}/{profile}")
async def config_at_branch(
    application: str,
    profile: str,
    environment: Environment = Depends(get_environment),
    svc: ConfigService = Depends(get_service),
):
    body = await svc.environment_response(environment, application, profile, None)
    return JSONResponse(body.to_json())
