from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from ..middleware.auth import require_basic_auth
from ..models import UiMeta
from ..state import AppState
from .deps import get_state

router = APIRouter(tags=["ui"], dependencies=[Depends(require_basic_auth)])

META_PLACEHOLDER = "__META_JSON__"


@lru_cache(maxsize=1)
def _template() -> str:
    return (Path(__file__).parent.parent / "templates" / "ui.html").read_text(encoding="utf-8")


async def _snapshot(state: AppState) -> UiMeta:
    return await state.service.ui_meta(
        state.registry, state.http.normalized_base_path, state.auth.required
    )


def render_ui(meta: UiMeta) -> str:
    # "</" would close the <script> block early
    payload = json.dumps(meta.model_dump()).replace("</", "<\\/")
    return _template().replace(META_PLACEHOLDER, payload)


@router.get("/ui", response_class=HTMLResponse)
async def ui(state: AppState = Depends(get_state)):
    return HTMLResponse(render_ui(await _snapshot(state)))


@router.get("/ui/meta", response_model=UiMeta)
async def ui_meta(state: AppState = Depends(get_state)):
    return await _snapshot(state)
