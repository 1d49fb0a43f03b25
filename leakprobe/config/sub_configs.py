"""leakprobe.config.sub_configs: ネスト設定用 dataclass 定義."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """推論失敗時の再試行設定.

    TIME_WAIT によるエフェメラルポート枯渇からの回復待ちに使う固定間隔の再試行.
    """

    max_retries: int = 5
    sleep_secs: float = 60
