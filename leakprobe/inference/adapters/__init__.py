"""プロトコル別推論クライアントのアダプタモジュール."""

from leakprobe.inference.interfaces import IClientFactory, IProtocolClient

from .grpc_client_adapter import GrpcProtocolClient
from .http_client_adapter import HttpProtocolClient

_CLIENT_FACTORIES = {
    "http": HttpProtocolClient.create,
    "grpc": GrpcProtocolClient.create,
}


def resolve_client_factory(protocol: str) -> IClientFactory:
    """プロトコル名からクライアント生成関数を解決する.

    Args:
        protocol: "http" または "grpc".

    Returns:
        クライアント生成関数.

    Raises:
        ValueError: 未対応のプロトコルが指定された場合.
    """
    if protocol not in _CLIENT_FACTORIES:
        raise ValueError(
            f"Invalid protocol: {protocol} "
            f"(利用可能: {list(_CLIENT_FACTORIES.keys())})"
        )
    return _CLIENT_FACTORIES[protocol]


__all__ = [
    "IClientFactory",
    "IProtocolClient",
    "GrpcProtocolClient",
    "HttpProtocolClient",
    "resolve_client_factory",
]
