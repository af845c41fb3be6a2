from .responses import (
    EnvironmentResponse,
    EnvMeta,
    FileListResponse,
    PropertySource,
    UiMeta,
)

__all__ = [
    "EnvironmentResponse",
    "EnvMeta",
    "FileListResponse",
    "PropertySource",
    "UiMeta",
]
