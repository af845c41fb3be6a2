from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from ..middleware.auth import require_basic_auth
from ..models import FileListResponse
from ..registry import Environment
from ..services import ConfigService
from .deps import get_environment, get_service

router = APIRouter(tags=["env"], dependencies=[Depends(require_basic_auth)])


@router.get("/{env}/env")
async def env_json(environment: Environment = Depends(get_environment)):
    return JSONResponse({k: environment.env_vars[k] for k in sorted(environment.env_vars)})


@router.get("/{env}/env/export", response_class=PlainTextResponse)
async def env_export(
    environment: Environment = Depends(get_environment),
    svc: ConfigService = Depends(get_service),
):
    return PlainTextResponse(svc.env_exports(environment), media_type="text/plain; charset=utf-8")


@router.get("/{env}/files", response_model=FileListResponse)
async def env_files(
    environment: Environment = Depends(get_environment),
    svc: ConfigService = Depends(get_service),
):
    return FileListResponse(files=await svc.list_files(environment))
