"""テスト共通フィクスチャ."""

import json
import logging
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
import pytest

from leakprobe.inference.errors import InferenceTransportError
from leakprobe.inference.types import (
    InferOptions,
    InferResultView,
    InputTensor,
    OutputSpec,
    OutputTensor,
    RequestStatus,
)
from leakprobe.logging import LoggerManager

Outcome = Union[InferResultView, InferenceTransportError]


def build_echo_result(
    *,
    shape: tuple = (1, 16),
    datatype: str = "INT32",
    values: Optional[np.ndarray] = None,
    byte_size: Optional[int] = None,
    name: str = "OUTPUT0",
) -> InferResultView:
    """エコーモデルの応答を模した推論結果を作成する.

    Args:
        shape: 出力形状.
        datatype: 出力データ型.
        values: 出力値. 省略時は 0..15.
        byte_size: 出力バイト長. 省略時は values から算出する.
        name: 出力名.

    Returns:
        成功状態の推論結果.
    """
    if values is None:
        values = np.arange(16, dtype="<i4")
    output = OutputTensor(
        name=name,
        shape=shape,
        datatype=datatype,
        byte_size=values.nbytes if byte_size is None else byte_size,
        values=values,
    )
    return InferResultView(
        status=RequestStatus(ok=True),
        outputs={name: output},
        debug_string=json.dumps({"model_name": "custom_identity_int32"}),
    )


class StubProtocolClient:
    """IProtocolClient を満たすテスト用スタブ."""

    def __init__(self, outcomes: Callable[[], Outcome]) -> None:
        """スタブを初期化する.

        Args:
            outcomes: 推論1回ごとに結果または通信エラーを返す関数.
        """
        self._outcomes = outcomes
        self.infer_calls = 0
        self.closed = False

    def infer(
        self,
        options: InferOptions,
        inputs: Sequence[InputTensor],
        outputs: Sequence[OutputSpec],
    ) -> InferResultView:
        """用意された結果を返すか通信エラーを送出する."""
        self.infer_calls += 1
        outcome = self._outcomes()
        if isinstance(outcome, InferenceTransportError):
            raise outcome
        return outcome

    def close(self) -> None:
        """クローズを記録する."""
        self.closed = True


class StubClientFactory:
    """生成したスタブ接続を記録するファクトリ."""

    def __init__(self, outcomes: Sequence[Outcome] = ()) -> None:
        """ファクトリを初期化する.

        Args:
            outcomes: 全接続で共有する推論結果の順序. 使い切った後は正常応答を返す.
        """
        self._outcomes: List[Outcome] = list(outcomes)
        self.clients: List[StubProtocolClient] = []
        self.calls: List[dict] = []

    def _next_outcome(self) -> Outcome:
        if self._outcomes:
            return self._outcomes.pop(0)
        return build_echo_result()

    def __call__(
        self, url: str, verbose: bool = False, client_timeout_us: Optional[int] = None
    ) -> StubProtocolClient:
        """スタブ接続を生成する."""
        self.calls.append(
            {"url": url, "verbose": verbose, "client_timeout_us": client_timeout_us}
        )
        client = StubProtocolClient(self._next_outcome)
        self.clients.append(client)
        return client

    @property
    def total_infer_calls(self) -> int:
        """全接続の推論呼び出し回数を返す."""
        return sum(client.infer_calls for client in self.clients)


@pytest.fixture
def echo_result_builder() -> Callable[..., InferResultView]:
    """エコー応答を模した推論結果を作成するファクトリフィクスチャ.

    Example:
        >>> def test_example(echo_result_builder):
        ...     result = echo_result_builder(datatype="FP32")
    """
    return build_echo_result


@pytest.fixture
def stub_factory_builder() -> Callable[..., StubClientFactory]:
    """StubClientFactory を作成するファクトリフィクスチャ.

    Example:
        >>> def test_example(stub_factory_builder):
        ...     factory = stub_factory_builder([InferenceTransportError("boom")])
    """

    def _create(outcomes: Sequence[Outcome] = ()) -> StubClientFactory:
        return StubClientFactory(outcomes)

    return _create


@pytest.fixture(autouse=True)
def reset_logger_manager():
    """各テストでLoggerManagerのシングルトン状態を初期化する.

    CLIロガーのハンドラーはテスト中の標準エラー出力を掴むため, 合わせて外す.
    """
    yield
    cli_logger = logging.getLogger("leakprobe")
    for handler in list(cli_logger.handlers):
        cli_logger.removeHandler(handler)
    LoggerManager.reset()
