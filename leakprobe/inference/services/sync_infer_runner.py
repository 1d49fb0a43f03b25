"""同期推論を指定回数繰り返し, 結果を検証するサービス."""

import logging
import time
from typing import Callable, Optional

from leakprobe.config import RetryPolicy
from leakprobe.inference.errors import InferenceTransportError, RetryExhaustedError
from leakprobe.inference.interfaces import IClientFactory, IProtocolClient
from leakprobe.inference.services.response_validator import ResponseValidator
from leakprobe.inference.types import InferResultView, RunSummary, SyncInferRequest
from leakprobe.logging import LoggerManager

logger: logging.Logger = LoggerManager().get_logger(__name__)


class SyncInferRunner:
    """接続方針と再試行方針に従って同期推論ループを実行するサービス."""

    def __init__(
        self,
        client_factory: IClientFactory,
        validator: ResponseValidator,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        """ランナーを初期化する.

        Args:
            client_factory: プロトコル別のクライアント生成関数.
            validator: 推論結果の検証サービス.
            retry_policy: 通信エラー時の再試行設定.
            sleep: 再試行前の待機関数. Noneなら time.sleep.
        """
        self.client_factory = client_factory
        self.validator = validator
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep or time.sleep
        self._connections_created = 0
        self._attempts = 0

    def run(self, request: SyncInferRequest) -> RunSummary:
        """推論を repetitions 回実行し, 各結果を検証する.

        最初に接続を1本生成する. reuse が無効な場合は繰り返しごとに
        新しい接続を生成して直前の接続を閉じるため, 接続数は repetitions + 1 になる.

        Args:
            request: 実行パラメータ.

        Returns:
            実行集計.

        Raises:
            ClientCreationError: 接続の生成に失敗した場合.
            RetryExhaustedError: 再試行を使い切った場合.
            InferenceRequestError: サーバーがリクエスト失敗を報告した場合.
            ResponseValidationError: 出力の検証に失敗した場合.
        """
        self._connections_created = 0
        self._attempts = 0

        client = self._connect(request)
        try:
            for i in range(request.repetitions):
                if not request.reuse:
                    replacement = self._connect(request)
                    client.close()
                    client = replacement

                result = self._infer_with_retries(client, request)
                self.validator.validate(result)
                logger.debug(f"repetition {i + 1}/{request.repetitions} validated")
        finally:
            client.close()

        return RunSummary(
            repetitions=request.repetitions,
            connections_created=self._connections_created,
            attempts=self._attempts,
        )

    def _connect(self, request: SyncInferRequest) -> IProtocolClient:
        """新しい接続を生成する."""
        client = self.client_factory(
            request.url,
            verbose=request.verbose,
            client_timeout_us=request.options.client_timeout_us,
        )
        self._connections_created += 1
        return client

    def _infer_with_retries(
        self, client: IProtocolClient, request: SyncInferRequest
    ) -> InferResultView:
        """通信エラー時は固定間隔で再試行しながら推論する.

        ホストのソケットが TIME_WAIT で枯渇した場合に備え, 待機してから再試行する.
        サーバーが報告したリクエスト失敗は再試行せず結果として返す.
        """
        max_retries = self.retry_policy.max_retries
        sleep_secs = self.retry_policy.sleep_secs

        attempt = 0
        while True:
            try:
                return self._try_infer(client, request)
            except InferenceTransportError as error:
                if attempt >= max_retries:
                    raise RetryExhaustedError(max_retries, error) from error
                attempt += 1
                logger.warning(f"Error: {error}")
                logger.warning(
                    f"Sleeping for {sleep_secs} seconds and retrying. "
                    f"[Attempt: {attempt}/{max_retries}]"
                )
            self._sleep(sleep_secs)

    def _try_infer(
        self, client: IProtocolClient, request: SyncInferRequest
    ) -> InferResultView:
        """試行回数を数えて推論を1回実行する."""
        self._attempts += 1
        return client.infer(request.options, request.inputs, request.outputs)
