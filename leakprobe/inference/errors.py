"""プローブ実行中に発生するエラー型.

全てのエラーは ``ProbeError`` を基底とし, CLI のエントリーポイントで
終了コード1へ変換される. 再試行の対象は ``InferenceTransportError`` のみ.
"""

from __future__ import annotations

from typing import Optional


class ProbeError(Exception):
    """leakprobe の全エラーの基底クラス."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UsageError(ProbeError):
    """コマンドライン引数の解析エラー."""


class ClientCreationError(ProbeError):
    """クライアント接続の生成に失敗した."""


class InferenceTransportError(ProbeError):
    """通信路レベルの推論失敗. 一定時間待って再試行する."""

    def __init__(self, message: str, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status


class RetryExhaustedError(ProbeError):
    """再試行回数を使い切っても推論が成功しなかった."""

    def __init__(self, max_retries: int, last_error: InferenceTransportError) -> None:
        super().__init__(
            f"Exceeded max tries [{max_retries}] on inference without success"
        )
        self.max_retries = max_retries
        self.last_error = last_error


class InferenceRequestError(ProbeError):
    """サーバーが推論リクエストの失敗を報告した. 再試行しない."""


class ResponseValidationError(ProbeError):
    """推論レスポンスの検証失敗の基底クラス."""


class ShapeMismatchError(ResponseValidationError):
    """出力テンソルの形状が期待値と異なる."""


class DatatypeMismatchError(ResponseValidationError):
    """出力テンソルのデータ型が期待値と異なる."""


class ByteSizeMismatchError(ResponseValidationError):
    """出力テンソルのバイト長が期待値と異なる."""


class ValueMismatchError(ResponseValidationError):
    """出力テンソルの値が入力と一致しない."""
