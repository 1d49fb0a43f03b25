"""argparse用のカスタム型バリデーション関数."""

import argparse

SUPPORTED_PROTOCOLS = ("http", "grpc")
UNKNOWN_PROTOCOL = "unknown"


def positive_int(value: str) -> int:
    """argparse用の正の整数バリデーション.

    Args:
        value (str): コマンドライン引数の文字列値

    Returns:
        int: 変換された正の整数

    Raises:
        argparse.ArgumentTypeError: 値が1未満の場合
    """
    int_value = int(value)
    if int_value < 1:
        raise argparse.ArgumentTypeError(f"1以上の整数を指定してください: {value}")
    return int_value


def protocol_name(value: str) -> str:
    """プロトコル名を小文字へ正規化する.

    未対応の値はエラーにせず "unknown" を返し, 使い方の表示は呼び出し側で行う.

    Args:
        value (str): コマンドライン引数の文字列値

    Returns:
        str: "http", "grpc", または "unknown"
    """
    normalized = value.lower()
    if normalized in SUPPORTED_PROTOCOLS:
        return normalized
    return UNKNOWN_PROTOCOL
