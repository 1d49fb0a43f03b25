"""GrpcProtocolClient と resolve_client_factory の単体テスト."""

import json
from typing import Any, Dict, List, Optional

import numpy as np
import pytest
from tritonclient.grpc import service_pb2
from tritonclient.utils import InferenceServerException

from leakprobe.config import ProbeConfig
from leakprobe.inference import (
    build_infer_options,
    build_input_tensor,
    build_output_spec,
)
from leakprobe.inference.adapters import (
    GrpcProtocolClient,
    HttpProtocolClient,
    resolve_client_factory,
)
from leakprobe.inference.errors import ClientCreationError, InferenceTransportError


def _echo_response(raw: Optional[bytes] = None) -> service_pb2.ModelInferResponse:
    """エコーモデルの gRPC 応答を作成する."""
    if raw is None:
        raw = np.arange(16, dtype="<i4").tobytes()
    response = service_pb2.ModelInferResponse(
        model_name="custom_identity_int32", model_version="1"
    )
    output = response.outputs.add()
    output.name = "OUTPUT0"
    output.datatype = "INT32"
    output.shape.extend([1, 16])
    response.raw_output_contents.append(raw)
    return response


class _StubGrpcResult:
    """tritonclient.grpc.InferResult の最小スタブ."""

    def __init__(self, response: service_pb2.ModelInferResponse) -> None:
        self._response = response

    def get_response(self) -> service_pb2.ModelInferResponse:
        return self._response


class _StubGrpcClient:
    """tritonclient.grpc.InferenceServerClient の最小スタブ."""

    def __init__(self, outcome: Any) -> None:
        self._outcome = outcome
        self.infer_kwargs: List[Dict[str, Any]] = []
        self.closed = False

    def infer(self, **kwargs: Any) -> Any:
        self.infer_kwargs.append(kwargs)
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    def close(self) -> None:
        self.closed = True


def _infer(client: GrpcProtocolClient, config: Optional[ProbeConfig] = None):
    options = build_infer_options(config or ProbeConfig(protocol="grpc"))
    return client.infer(options, (build_input_tensor(),), (build_output_spec(),))


class TestCreate:
    """接続生成のテスト."""

    def test_create_passes_url_and_verbose(self, monkeypatch):
        """URLと詳細出力フラグだけがクライアントへ渡される."""
        captured: Dict[str, Any] = {}

        def _fake_client(**kwargs: Any) -> _StubGrpcClient:
            captured.update(kwargs)
            return _StubGrpcClient(None)

        monkeypatch.setattr(
            "leakprobe.inference.adapters.grpc_client_adapter.grpcclient.InferenceServerClient",
            _fake_client,
        )

        client = GrpcProtocolClient.create(
            "localhost:8001", verbose=True, client_timeout_us=1000
        )

        assert isinstance(client, GrpcProtocolClient)
        assert captured == {"url": "localhost:8001", "verbose": True}

    def test_create_failure_raises_client_creation_error(self, monkeypatch):
        """生成時の例外は ClientCreationError へ変換される."""

        def _fake_client(**kwargs: Any) -> _StubGrpcClient:
            raise InferenceServerException(msg="invalid channel args")

        monkeypatch.setattr(
            "leakprobe.inference.adapters.grpc_client_adapter.grpcclient.InferenceServerClient",
            _fake_client,
        )

        with pytest.raises(ClientCreationError, match="invalid channel args"):
            GrpcProtocolClient.create("localhost:8001")


class TestInfer:
    """推論呼び出しのテスト."""

    def test_successful_echo(self):
        """正常応答が共通結果型へ変換される."""
        stub = _StubGrpcClient(_StubGrpcResult(_echo_response()))

        result = _infer(GrpcProtocolClient(stub))

        assert result.status.ok is True
        output = result.output("OUTPUT0")
        assert output.shape == (1, 16)
        assert output.datatype == "INT32"
        assert output.byte_size == 64
        assert output.values.tolist() == list(range(16))
        debug = json.loads(result.debug_string)
        assert debug["model_name"] == "custom_identity_int32"
        assert debug["outputs"][0]["name"] == "OUTPUT0"

    def test_timeout_is_passed_per_call(self):
        """タイムアウトは秒へ換算して推論呼び出しごとに渡される."""
        stub = _StubGrpcClient(_StubGrpcResult(_echo_response()))
        config = ProbeConfig(protocol="grpc", client_timeout_us=2_000_000)

        _infer(GrpcProtocolClient(stub), config)

        kwargs = stub.infer_kwargs[0]
        assert kwargs["client_timeout"] == pytest.approx(2.0)
        assert kwargs["model_name"] == "custom_identity_int32"
        assert [i.name() for i in kwargs["inputs"]] == ["INPUT0"]

    def test_without_timeout_passes_none(self):
        """タイムアウト未指定時は None を渡す."""
        stub = _StubGrpcClient(_StubGrpcResult(_echo_response()))

        _infer(GrpcProtocolClient(stub))

        assert stub.infer_kwargs[0]["client_timeout"] is None

    def test_truncated_raw_output(self):
        """4バイト境界に揃わない出力は値なし・実バイト長で返される."""
        raw = np.arange(16, dtype="<i4").tobytes()[:-2]
        stub = _StubGrpcClient(_StubGrpcResult(_echo_response(raw)))

        output = _infer(GrpcProtocolClient(stub)).output("OUTPUT0")

        assert output.values is None
        assert output.byte_size == 62

    @pytest.mark.parametrize(
        "status",
        [
            "StatusCode.UNAVAILABLE",
            "StatusCode.DEADLINE_EXCEEDED",
            "StatusCode.RESOURCE_EXHAUSTED",
        ],
    )
    def test_transport_status_becomes_transport_error(self, status):
        """接続の張り直しで回復しうるステータスは通信エラーになる."""
        stub = _StubGrpcClient(InferenceServerException(msg="failed", status=status))

        with pytest.raises(InferenceTransportError) as e:
            _infer(GrpcProtocolClient(stub))

        assert e.value.status == status

    @pytest.mark.parametrize(
        "status", ["StatusCode.NOT_FOUND", "StatusCode.INVALID_ARGUMENT", None]
    )
    def test_other_status_becomes_failed_result(self, status):
        """それ以外のエラーはサーバー報告の失敗として返される."""
        stub = _StubGrpcClient(
            InferenceServerException(msg="Request for unknown model", status=status)
        )

        result = _infer(GrpcProtocolClient(stub))

        assert result.status.ok is False
        assert "unknown model" in result.status.message

    def test_close(self):
        """close でチャネルを閉じる."""
        stub = _StubGrpcClient(None)

        GrpcProtocolClient(stub).close()

        assert stub.closed is True


class TestResolveClientFactory:
    """プロトコル名からのファクトリ解決のテスト."""

    def test_http(self):
        assert resolve_client_factory("http") == HttpProtocolClient.create

    def test_grpc(self):
        assert resolve_client_factory("grpc") == GrpcProtocolClient.create

    def test_unknown_protocol(self):
        with pytest.raises(ValueError, match="Invalid protocol"):
            resolve_client_factory("unknown")
