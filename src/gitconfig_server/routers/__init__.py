from .config_router import router as config_router
from .env_router import router as env_router
from .file_router import router as file_router
from .ui_router import router as ui_router

# Order matters: literal segments (env, files, file, ui) must be tried
# before the generic /{env}/{application}/{profile}[/{label}] lookup.
ROUTERS = [ui_router, env_router, file_router, config_router]

__all__ = ["ROUTERS", "config_router", "env_router", "file_router", "ui_router"]
