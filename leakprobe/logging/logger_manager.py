"""
leakprobe.logging.logger_manager: ログ管理マネージャー.

colorlogを使用して診断メッセージを標準エラー出力へ流す
"""

import logging
import sys
from enum import Enum
from typing import Dict, Optional

try:
    import colorlog

    COLORLOG_AVAILABLE = True
except ImportError:
    COLORLOG_AVAILABLE = False


class LevelBasedFormatter(logging.Formatter):
    """詳細モードによって切り替わるログ形式."""

    def __init__(
        self,
        info_format: str,
        debug_format: str,
        datefmt: str,
        use_color: bool = False,
        log_colors: dict | None = None,
        force_debug_format: bool = False,
    ) -> None:
        """ログ整形の初期化."""
        super().__init__(datefmt=datefmt)
        self._use_color = use_color
        self._force_debug_format = force_debug_format
        if use_color:
            self._info_formatter = colorlog.ColoredFormatter(
                info_format, datefmt=datefmt, log_colors=log_colors or {}
            )
            self._debug_formatter = colorlog.ColoredFormatter(
                debug_format, datefmt=datefmt, log_colors=log_colors or {}
            )
        else:
            self._info_formatter = logging.Formatter(info_format, datefmt=datefmt)
            self._debug_formatter = logging.Formatter(debug_format, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """ログレコードを整形."""
        record.levelname = {"WARNING": "WARN"}.get(record.levelname, record.levelname)
        if self._force_debug_format:
            return str(self._debug_formatter.format(record))
        return str(self._info_formatter.format(record))


class LogLevel(Enum):
    """ログレベル列挙型."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LoggerManager:
    """
    ログ管理マネージャークラス.

    プローブ全体で一貫したログ設定を提供する. 推論結果のダンプは
    標準出力へ直接書き出すため, ハンドラーは常に標準エラー出力を使う.

    Attributes:
        _loggers (Dict[str, logging.Logger]): 管理されているロガーの辞書
        _default_level (LogLevel): デフォルトのログレベル
    """

    _instance: Optional["LoggerManager"] = None
    _loggers: Dict[str, logging.Logger] = {}

    def __new__(cls) -> "LoggerManager":
        """シングルトンパターンの実装."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """LoggerManagerを初期化."""
        if hasattr(self, "_initialized"):
            return

        self._default_level = LogLevel.INFO
        self._use_debug_format = False
        self._date_format = "%H:%M:%S"
        self._log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARN": "yellow",
            "WARNING": "yellow",
            "ERROR": "red",
        }
        self._initialized = True

    def get_logger(self, name: str, level: Optional[LogLevel] = None) -> logging.Logger:
        """
        指定された名前のロガーを取得または作成.

        Args:
            name (str): ロガー名
            level (LogLevel, optional): ログレベル

        Returns:
            logging.Logger: 設定されたロガー

        Examples:
            >>> logger = LoggerManager().get_logger("leakprobe")
            >>> logger.warning("再試行します")
            12:00:00|WARN | 再試行します
        """
        if name in self._loggers:
            return self._loggers[name]

        logger = logging.getLogger(name)
        if not logger.handlers:
            logger.setLevel(getattr(logging, (level or self._default_level).value))
            logger.addHandler(self._create_handler())
            logger.propagate = False

        self._loggers[name] = logger
        return logger

    def _create_handler(self) -> logging.Handler:
        """
        標準エラー出力向けのハンドラーを作成.

        Returns:
            logging.Handler: 作成されたハンドラー
        """
        handler: logging.Handler
        if COLORLOG_AVAILABLE:
            handler = colorlog.StreamHandler(sys.stderr)
            formatter = LevelBasedFormatter(
                "%(asctime)s|%(log_color)s%(levelname)-5.5s%(reset)s| %(message)s",
                "%(asctime)s|%(log_color)s%(levelname)-5.5s%(reset)s|"
                "%(name)-32s|%(lineno)03d| %(message)s",
                datefmt=self._date_format,
                use_color=True,
                log_colors=self._log_colors,
                force_debug_format=self._use_debug_format,
            )
        else:
            handler = logging.StreamHandler(sys.stderr)
            formatter = LevelBasedFormatter(
                "%(asctime)s|%(levelname)-5.5s| %(message)s",
                "%(asctime)s|%(levelname)-5.5s|%(name)-32s|%(lineno)03d| %(message)s",
                datefmt=self._date_format,
                force_debug_format=self._use_debug_format,
            )

        handler.setFormatter(formatter)
        return handler

    def set_default_level(self, level: LogLevel) -> None:
        """
        デフォルトのログレベルを設定.

        DEBUG指定時は既存ハンドラーも詳細フォーマットへ切り替える.

        Args:
            level (LogLevel): 新しいデフォルトレベル
        """
        self._default_level = level
        self._use_debug_format = level == LogLevel.DEBUG
        for logger in self._loggers.values():
            for handler in logger.handlers:
                if isinstance(handler.formatter, LevelBasedFormatter):
                    handler.formatter._force_debug_format = self._use_debug_format

    def set_logger_level(self, name: str, level: LogLevel) -> None:
        """
        特定のロガーのレベルを設定.

        Args:
            name (str): ロガー名
            level (LogLevel): 新しいログレベル
        """
        if name in self._loggers:
            self._loggers[name].setLevel(getattr(logging, level.value))

    def get_available_loggers(self) -> list[str]:
        """管理されているロガー名の一覧を返す."""
        return list(self._loggers.keys())

    @classmethod
    def reset(cls) -> None:
        """シングルトンインスタンスをリセット（主にテスト用）."""
        cls._instance = None
        cls._loggers.clear()
