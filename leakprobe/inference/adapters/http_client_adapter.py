"""tritonclient.http を IProtocolClient として扱うためのアダプタ."""

import http.client
import json
from typing import Any, Dict, Optional, Sequence

import numpy as np
import tritonclient.http as httpclient
from tritonclient.utils import InferenceServerException

from leakprobe.inference.errors import ClientCreationError, InferenceTransportError
from leakprobe.inference.types import (
    InferOptions,
    InferResultView,
    InputTensor,
    OutputSpec,
    OutputTensor,
    RequestStatus,
)


class HttpProtocolClient:
    """HTTP/REST 接続1本を保持するクライアント.

    ソケットレベルの失敗 (接続拒否, タイムアウト, ポート枯渇) は
    通信エラーとして送出し, サーバーが返したエラーレスポンスは
    エラー状態の結果として返す.
    """

    def __init__(self, client: httpclient.InferenceServerClient) -> None:
        """tritonclientのHTTPクライアントを受け取って初期化する.

        Args:
            client: HTTPクライアント.
        """
        self.client = client

    @classmethod
    def create(
        cls, url: str, verbose: bool = False, client_timeout_us: Optional[int] = None
    ) -> "HttpProtocolClient":
        """新しいHTTP接続を生成する.

        Args:
            url: 推論サーバーのURL (スキームなし, 例: localhost:8000).
            verbose: tritonclientの詳細出力を有効化するかどうか.
            client_timeout_us: 接続・通信タイムアウト (マイクロ秒).

        Returns:
            生成したクライアント.

        Raises:
            ClientCreationError: クライアントの生成に失敗した場合.
        """
        kwargs: Dict[str, Any] = {}
        if client_timeout_us is not None:
            timeout_secs = client_timeout_us / 1_000_000
            kwargs["connection_timeout"] = timeout_secs
            kwargs["network_timeout"] = timeout_secs
        try:
            client = httpclient.InferenceServerClient(url=url, verbose=verbose, **kwargs)
        except (InferenceServerException, OSError, ValueError) as e:
            raise ClientCreationError(f"unable to create client: {e}") from e
        return cls(client)

    def infer(
        self,
        options: InferOptions,
        inputs: Sequence[InputTensor],
        outputs: Sequence[OutputSpec],
    ) -> InferResultView:
        """同期推論を1回実行する."""
        infer_inputs = []
        for tensor in inputs:
            infer_input = httpclient.InferInput(
                tensor.name, list(tensor.shape), tensor.datatype
            )
            infer_input.set_data_from_numpy(tensor.data, binary_data=True)
            infer_inputs.append(infer_input)
        requested = [
            httpclient.InferRequestedOutput(output.name, binary_data=True)
            for output in outputs
        ]

        try:
            result = self.client.infer(
                model_name=options.model_name,
                inputs=infer_inputs,
                model_version=options.model_version,
                outputs=requested,
            )
        except InferenceServerException as e:
            return InferResultView.failed(str(e))
        except (OSError, http.client.HTTPException) as e:
            # 受け付け直後にサーバーが接続を閉じた場合は HTTPException になる
            raise InferenceTransportError(f"{type(e).__name__}: {e}") from e

        return self._to_view(result, outputs)

    def close(self) -> None:
        """接続を閉じる."""
        self.client.close()

    @staticmethod
    def _to_view(
        result: httpclient.InferResult, outputs: Sequence[OutputSpec]
    ) -> InferResultView:
        """HTTPの推論結果を共通結果型へ変換する."""
        tensors: Dict[str, OutputTensor] = {}
        for spec in outputs:
            output = result.get_output(spec.name)
            if output is None:
                continue

            # 形状とバイト長が食い違う場合は as_numpy が reshape に失敗する
            try:
                values: Optional[np.ndarray] = np.asarray(
                    result.as_numpy(spec.name)
                ).reshape(-1)
            except (ValueError, TypeError):
                values = None

            parameters = output.get("parameters", {})
            fallback_size = values.nbytes if values is not None else 0
            tensors[spec.name] = OutputTensor(
                name=spec.name,
                shape=tuple(int(dim) for dim in output.get("shape", [])),
                datatype=output.get("datatype", ""),
                byte_size=int(parameters.get("binary_data_size", fallback_size)),
                values=values,
            )

        return InferResultView(
            status=RequestStatus(ok=True),
            outputs=tensors,
            debug_string=json.dumps(result.get_response()),
        )
