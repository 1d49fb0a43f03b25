"""
leakprobeの推論モジュール.

リクエストの組み立て, プロトコル別クライアント, 実行ループと検証を提供します。
"""

from .request_builder import build_infer_options, build_input_tensor, build_output_spec

__all__ = ["build_infer_options", "build_input_tensor", "build_output_spec"]
