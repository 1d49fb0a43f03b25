"""
leakprobe: 推論サーバーへの同期推論を繰り返し, エコー応答を検証するプローブ.

HTTP/gRPC の接続を繰り返し張り直しながら推論を送り続け,
クライアントとサーバー双方のリソースリークを炙り出す

Example:
    >>> from leakprobe import ProbeConfig, run_probe
    >>> summary = run_probe(ProbeConfig(protocol="grpc", repetitions=10))
    >>> summary.connections_created
    11
"""

from .cli.probe import main, run_probe
from .config import ProbeConfig, RetryPolicy
from .logging import LoggerManager

__version__ = "0.1.0"

__all__ = ["LoggerManager", "ProbeConfig", "RetryPolicy", "main", "run_probe"]
