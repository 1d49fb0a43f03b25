"""leakprobe.config.probe_config: 型付き設定の Pydantic モデル."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .sub_configs import RetryPolicy

DEFAULT_MODEL_NAME = "custom_identity_int32"

_DEFAULT_URLS: Dict[str, str] = {
    "http": "localhost:8000",
    "grpc": "localhost:8001",
}


class ProbeConfig(BaseModel):
    """プローブ実行の型付き設定."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    protocol: Literal["http", "grpc"] = "http"
    url: str
    verbose: bool = False
    client_timeout_us: Optional[int] = Field(default=None, gt=0)
    repetitions: int = Field(default=100, gt=0)
    reuse: bool = False
    model_name: str = DEFAULT_MODEL_NAME
    model_version: str = ""
    retry: RetryPolicy = Field(default_factory=RetryPolicy)

    @model_validator(mode="before")
    @classmethod
    def resolve_default_url(cls, data: Any) -> Any:
        """URL未指定時にプロトコル既定のURLを補う."""
        if isinstance(data, dict) and data.get("url") is None:
            protocol = data.get("protocol", "http")
            if protocol in _DEFAULT_URLS:
                data = {**data, "url": _DEFAULT_URLS[protocol]}
        return data

    @field_validator("url", mode="before")
    @classmethod
    def url_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        """URLが空文字でないことを検証する."""
        if isinstance(v, str) and v.strip() == "":
            raise ValueError("URLは空文字を許可しません")
        return v
