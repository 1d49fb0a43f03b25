"""推論モジュールで共有する型定義."""

from .request_types import InferOptions, InputTensor, OutputSpec, SyncInferRequest
from .result_types import InferResultView, OutputTensor, RequestStatus, RunSummary

__all__ = [
    "InferOptions",
    "InputTensor",
    "OutputSpec",
    "SyncInferRequest",
    "InferResultView",
    "OutputTensor",
    "RequestStatus",
    "RunSummary",
]
