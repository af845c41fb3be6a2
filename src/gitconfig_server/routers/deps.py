from __future__ import annotations

from fastapi import Depends, Request

from ..registry import Environment
from ..services import ConfigService
from ..state import AppState


def get_state(request: Request) -> AppState:
    return request.app.state.gitconfig


def get_service(state: AppState = Depends(get_state)) -> ConfigService:
    return state.service


def get_environment(env: str, state: AppState = Depends(get_state)) -> Environment:
    # unknown env -> NotFoundError -> protocol 404 body
    return state.registry.get(env)
