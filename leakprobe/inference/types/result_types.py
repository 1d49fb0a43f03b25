"""推論レスポンスと実行集計のデータ型."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class RequestStatus:
    """サーバーが報告したリクエスト状態."""

    ok: bool = True
    message: str = ""

    def __str__(self) -> str:
        return "OK" if self.ok else self.message


@dataclass(frozen=True)
class OutputTensor:
    """レスポンスから取り出した出力テンソル.

    Args:
        name: 出力名.
        shape: サーバーが報告した形状.
        datatype: サーバーが報告したデータ型タグ.
        byte_size: 生データのバイト長.
        values: INT32として解釈した平坦な値配列. 解釈できない場合はNone.
    """

    name: str
    shape: Tuple[int, ...]
    datatype: str
    byte_size: int
    values: Optional[np.ndarray] = None


@dataclass(frozen=True)
class InferResultView:
    """プロトコル差分を吸収した推論結果.

    Args:
        status: リクエスト状態.
        outputs: 出力名から出力テンソルへの辞書.
        debug_string: レスポンス全体のデバッグ表現.
    """

    status: RequestStatus
    outputs: Dict[str, OutputTensor] = field(default_factory=dict)
    debug_string: str = ""

    @classmethod
    def failed(cls, message: str) -> "InferResultView":
        """サーバー報告の失敗を表す結果を作成する."""
        return cls(status=RequestStatus(ok=False, message=message))

    def output(self, name: str) -> OutputTensor:
        """指定名の出力テンソルを返す.

        Raises:
            KeyError: レスポンスに指定名の出力が含まれない場合.
        """
        if name not in self.outputs:
            raise KeyError(f"unable to find output '{name}' in response")
        return self.outputs[name]


@dataclass(frozen=True)
class RunSummary:
    """同期推論ループの実行集計.

    Args:
        repetitions: 検証まで完了した繰り返し回数.
        connections_created: 生成したクライアント接続の数.
        attempts: 推論呼び出しの総回数 (再試行を含む).
    """

    repetitions: int
    connections_created: int
    attempts: int
