from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..middleware.auth import require_basic_auth
from ..registry import Environment
from ..services import ConfigService
from .deps import get_environment, get_service

router = APIRouter(tags=["files"], dependencies=[Depends(require_basic_auth)])


@router.get("/{env}/file/{label}/{path:path}")
async def raw_file(
    label: str,
    path: str,
    environment: Environment = Depends(get_environment),
    svc: ConfigService = Depends(get_service),
):
    content = await svc.render_file(environment, label, path)
    return Response(content=content.body, media_type=content.media_type)
