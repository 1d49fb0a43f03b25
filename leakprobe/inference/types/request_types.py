"""推論リクエストの構成要素を表すデータ型."""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class InputTensor:
    """サーバーへ送る入力テンソル.

    Args:
        name: 入力名.
        shape: 形状.
        datatype: Tritonのデータ型タグ (例: "INT32").
        data: 読み取り専用の値配列. 形状は ``shape`` と一致する.
    """

    name: str
    shape: Tuple[int, ...]
    datatype: str
    data: np.ndarray

    @property
    def byte_size(self) -> int:
        """生データのバイト長を返す."""
        return int(self.data.nbytes)


@dataclass(frozen=True)
class OutputSpec:
    """サーバーへ返却を要求する出力名."""

    name: str


@dataclass(frozen=True)
class InferOptions:
    """全リクエストで共有する推論設定.

    Args:
        model_name: 推論対象のモデル名.
        model_version: モデルバージョン. 空文字は最新版を意味する.
        client_timeout_us: クライアントタイムアウト (マイクロ秒). Noneなら無制限.
    """

    model_name: str
    model_version: str = ""
    client_timeout_us: Optional[int] = None

    @property
    def client_timeout_secs(self) -> Optional[float]:
        """タイムアウトを秒単位で返す."""
        if self.client_timeout_us is None:
            return None
        return self.client_timeout_us / 1_000_000


@dataclass(frozen=True)
class SyncInferRequest:
    """同期推論ループへの入力パラメータ.

    Args:
        url: 推論サーバーのURL.
        options: 推論オプション.
        inputs: 入力テンソル列.
        outputs: 返却を要求する出力列.
        repetitions: 推論の繰り返し回数.
        reuse: 全繰り返しで同じ接続を使うかどうか.
        verbose: クライアントの詳細出力を有効化するかどうか.
    """

    url: str
    options: InferOptions
    inputs: Tuple[InputTensor, ...]
    outputs: Tuple[OutputSpec, ...]
    repetitions: int = 100
    reuse: bool = False
    verbose: bool = False
