#!/usr/bin/env python3
"""エコーモデルへ同期推論を繰り返し送り, 応答を検証するCLI.

使用例:
    leakprobe
    leakprobe -i grpc -r 1000
    leakprobe -i http -u localhost:8000 -r 3 -R
"""

import argparse
import logging
import sys
from typing import Callable, NoReturn, Optional, Sequence

from pydantic import ValidationError

from leakprobe.cli.arg_types import UNKNOWN_PROTOCOL, positive_int, protocol_name
from leakprobe.config import ProbeConfig
from leakprobe.inference import (
    build_infer_options,
    build_input_tensor,
    build_output_spec,
)
from leakprobe.inference.adapters import resolve_client_factory
from leakprobe.inference.errors import ProbeError, UsageError
from leakprobe.inference.interfaces import IClientFactory
from leakprobe.inference.services import ResponseValidator, SyncInferRunner
from leakprobe.inference.types import RunSummary, SyncInferRequest
from leakprobe.logging import LoggerManager, LogLevel

LOGGER_NAME = "leakprobe"

USAGE_LINES = (
    "\t-v",
    "\t-i <http/grpc>",
    "\t-u <URL for inference service>",
    "\t-t <client timeout in microseconds>",
    "\t-r <number of repetitions for inference> default is 100.",
    "\t-R Re-use the same client for each repetition. Without this flag, "
    "the default is to create a new client on each repetition.",
)


class _ProbeArgumentParser(argparse.ArgumentParser):
    """解析エラーを終了ではなく UsageError として送出するパーサー."""

    def error(self, message: str) -> NoReturn:
        """解析エラーを UsageError へ変換する."""
        raise UsageError(message)


def print_usage(prog: str, message: Optional[str] = None) -> None:
    """使い方を標準エラー出力へ書き出す.

    Args:
        prog: プログラム名.
        message: 先頭に表示するエラーメッセージ.
    """
    if message:
        print(f"error: {message}", file=sys.stderr)
    print(f"Usage: {prog} [options]", file=sys.stderr)
    for line in USAGE_LINES:
        print(line, file=sys.stderr)
    print(file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    """CLI 引数パーサーを構築する."""
    parser = _ProbeArgumentParser(
        prog="leakprobe",
        add_help=False,
        description="エコーモデルへ同期推論を繰り返し送り, 応答を検証する",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="詳細出力を有効化",
    )
    parser.add_argument(
        "-i",
        "--protocol",
        type=protocol_name,
        default="http",
        help="推論サーバーとの通信プロトコル (http/grpc). 既定はhttp",
    )
    parser.add_argument(
        "-u",
        "--url",
        default=None,
        help="推論サーバーのURL. 既定はhttpでlocalhost:8000, grpcでlocalhost:8001",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=positive_int,
        default=None,
        help="クライアントタイムアウト (マイクロ秒)",
    )
    parser.add_argument(
        "-r",
        "--repetitions",
        type=positive_int,
        default=100,
        help="推論の繰り返し回数. 既定は100",
    )
    parser.add_argument(
        "-R",
        "--reuse",
        action="store_true",
        help="全繰り返しで同じクライアントを使う. 省略時は毎回新しく生成する",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """CLI 引数を解析する.

    Args:
        argv: 解析対象引数. 省略時は `sys.argv`.

    Returns:
        解析済み引数.

    Raises:
        UsageError: 未知のオプションや不正な値が指定された場合.
    """
    return build_parser().parse_args(argv)


def build_config(args: argparse.Namespace) -> ProbeConfig:
    """解析済み引数からプローブ設定を構築する.

    Raises:
        UsageError: 未対応のプロトコルや設定値の検証に失敗した場合.
    """
    if args.protocol == UNKNOWN_PROTOCOL:
        raise UsageError("Supports only http and grpc protocols")
    try:
        return ProbeConfig(
            protocol=args.protocol,
            url=args.url,
            verbose=args.verbose,
            client_timeout_us=args.timeout,
            repetitions=args.repetitions,
            reuse=args.reuse,
        )
    except ValidationError as e:
        raise UsageError(f"設定にエラーがあります:\n{e}") from e


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    ログ設定の初期化.

    Args:
        verbose (bool): 詳細モードが有効かどうか

    Returns:
        logger: 設定済みロガー
    """
    manager = LoggerManager()
    level = LogLevel.DEBUG if verbose else LogLevel.INFO
    manager.set_default_level(level)
    for existing_name in manager.get_available_loggers():
        manager.set_logger_level(existing_name, level)
    return manager.get_logger(LOGGER_NAME, level=level)


def run_probe(
    config: ProbeConfig,
    client_factory: Optional[IClientFactory] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> RunSummary:
    """設定に従って同期推論ループを実行する.

    Args:
        config: プローブ設定.
        client_factory: クライアント生成関数. 未指定時はプロトコルから解決する.
        sleep: 再試行前の待機関数.

    Returns:
        実行集計.
    """
    input_tensor = build_input_tensor()
    request = SyncInferRequest(
        url=config.url,
        options=build_infer_options(config),
        inputs=(input_tensor,),
        outputs=(build_output_spec(),),
        repetitions=config.repetitions,
        reuse=config.reuse,
        verbose=config.verbose,
    )
    runner = SyncInferRunner(
        client_factory=client_factory or resolve_client_factory(config.protocol),
        validator=ResponseValidator(input_tensor),
        retry_policy=config.retry,
        sleep=sleep,
    )
    return runner.run(request)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """エントリポイント.

    Args:
        argv: 解析対象引数. 省略時は `sys.argv`.

    Returns:
        終了コード. 全ての検証に成功した場合0, それ以外は1.
    """
    prog = "leakprobe"
    try:
        args = parse_args(argv)
        config = build_config(args)
    except UsageError as e:
        print_usage(prog, e.message)
        return 1

    logger = setup_logging(verbose=config.verbose)
    logger.debug(f"プロトコル: {config.protocol}")
    logger.debug(f"URL: {config.url}")
    logger.debug(f"繰り返し回数: {config.repetitions}")
    logger.debug(f"接続の再利用: {config.reuse}")

    try:
        summary = run_probe(config)
    except ProbeError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    logger.info(
        f"{summary.repetitions}回の推論を検証しました "
        f"(接続数: {summary.connections_created}, 試行数: {summary.attempts})"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
