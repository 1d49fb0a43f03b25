"""tritonclient.grpc を IProtocolClient として扱うためのアダプタ."""

import json
from typing import Dict, Optional, Sequence

import numpy as np
import tritonclient.grpc as grpcclient
from google.protobuf.json_format import MessageToDict
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

# 接続の張り直しで回復しうる gRPC ステータス
TRANSPORT_STATUSES = frozenset(
    {
        "StatusCode.UNAVAILABLE",
        "StatusCode.DEADLINE_EXCEEDED",
        "StatusCode.RESOURCE_EXHAUSTED",
    }
)

_INT32_BYTE_SIZE = 4


class GrpcProtocolClient:
    """gRPC チャネル1本を保持するクライアント."""

    def __init__(self, client: grpcclient.InferenceServerClient) -> None:
        """tritonclientのgRPCクライアントを受け取って初期化する.

        Args:
            client: gRPCクライアント.
        """
        self.client = client

    @classmethod
    def create(
        cls, url: str, verbose: bool = False, client_timeout_us: Optional[int] = None
    ) -> "GrpcProtocolClient":
        """新しいgRPC接続を生成する.

        gRPC のタイムアウトは呼び出し単位のため, client_timeout_us は使わず
        InferOptions 側の値を推論ごとに渡す.

        Args:
            url: 推論サーバーのURL (例: localhost:8001).
            verbose: tritonclientの詳細出力を有効化するかどうか.
            client_timeout_us: 未使用.

        Returns:
            生成したクライアント.

        Raises:
            ClientCreationError: クライアントの生成に失敗した場合.
        """
        try:
            client = grpcclient.InferenceServerClient(url=url, verbose=verbose)
        except (InferenceServerException, ValueError) as e:
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
            infer_input = grpcclient.InferInput(
                tensor.name, list(tensor.shape), tensor.datatype
            )
            infer_input.set_data_from_numpy(tensor.data)
            infer_inputs.append(infer_input)
        requested = [grpcclient.InferRequestedOutput(output.name) for output in outputs]

        try:
            result = self.client.infer(
                model_name=options.model_name,
                inputs=infer_inputs,
                model_version=options.model_version,
                outputs=requested,
                client_timeout=options.client_timeout_secs,
            )
        except InferenceServerException as e:
            if e.status() in TRANSPORT_STATUSES:
                raise InferenceTransportError(str(e), status=e.status()) from e
            return InferResultView.failed(str(e))

        return self._to_view(result)

    def close(self) -> None:
        """チャネルを閉じる."""
        self.client.close()

    @staticmethod
    def _to_view(result: grpcclient.InferResult) -> InferResultView:
        """gRPCの推論結果を共通結果型へ変換する."""
        response = result.get_response()
        raw_contents = response.raw_output_contents

        tensors: Dict[str, OutputTensor] = {}
        for index, output in enumerate(response.outputs):
            raw = raw_contents[index] if index < len(raw_contents) else b""
            values: Optional[np.ndarray] = None
            if len(raw) % _INT32_BYTE_SIZE == 0:
                values = np.frombuffer(raw, dtype="<i4")
            tensors[output.name] = OutputTensor(
                name=output.name,
                shape=tuple(int(dim) for dim in output.shape),
                datatype=output.datatype,
                byte_size=len(raw),
                values=values,
            )

        debug = MessageToDict(response, preserving_proto_field_name=True)
        return InferResultView(
            status=RequestStatus(ok=True),
            outputs=tensors,
            debug_string=json.dumps(debug),
        )
