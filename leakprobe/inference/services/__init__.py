"""推論の実行と検証を提供するサービス群."""

from .response_validator import ResponseValidator
from .sync_infer_runner import SyncInferRunner

__all__ = ["ResponseValidator", "SyncInferRunner"]
