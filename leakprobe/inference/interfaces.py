"""推論クライアントで共有するインターフェース定義.

HTTP と gRPC の両クライアントは `typing.Protocol` を満たす形で実装する.
構造的型付けにより, テストでは継承なしのスタブへ差し替えられる.
"""

from typing import Optional, Protocol, Sequence

from leakprobe.inference.types import (
    InferOptions,
    InferResultView,
    InputTensor,
    OutputSpec,
)


class IProtocolClient(Protocol):
    """推論サーバーへの接続1本を表すクライアントインターフェース."""

    def infer(
        self,
        options: InferOptions,
        inputs: Sequence[InputTensor],
        outputs: Sequence[OutputSpec],
    ) -> InferResultView:
        """同期推論を1回実行する.

        Args:
            options: 推論オプション.
            inputs: 入力テンソル列.
            outputs: 返却を要求する出力列.

        Returns:
            推論結果. サーバーが失敗を報告した場合はエラー状態の結果.

        Raises:
            InferenceTransportError: 通信路レベルで失敗した場合.
        """
        ...

    def close(self) -> None:
        """接続を閉じる."""
        ...


class IClientFactory(Protocol):
    """クライアント接続を生成するファクトリ."""

    def __call__(
        self, url: str, verbose: bool = False, client_timeout_us: Optional[int] = None
    ) -> IProtocolClient:
        """新しい接続を生成する.

        Raises:
            ClientCreationError: 接続の生成に失敗した場合.
        """
        ...
