from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PropertySource(BaseModel):
    name: str
    source: Dict[str, Any] = Field(default_factory=dict)


class EnvironmentResponse(BaseModel):
    """
    Envelope compatible with Spring Cloud Config's `Environment` resource.
    `label` is omitted from the JSON when the client did not ask for one.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    profiles: List[str] = Field(default_factory=list)
    label: Optional[str] = None
    version: str = ""
    state: str = ""
    property_sources: List[PropertySource] = Field(default_factory=list, alias="propertySources")

    def to_json(self) -> Dict[str, Any]:
        body = self.model_dump(by_alias=True)
        if body["label"] is None:
            del body["label"]
        return body


class FileListResponse(BaseModel):
    files: List[str] = Field(default_factory=list)


class EnvMeta(BaseModel):
    name: str
    repo_url: str
    branch: str
    workdir: str
    subpath: str = ""
    last_commit: str = ""
    last_commit_date: str = ""


class UiMeta(BaseModel):
    base_path: str = "/"
    environments: List[EnvMeta] = Field(default_factory=list)
    auth_enabled: bool = False
