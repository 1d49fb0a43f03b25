"""leakprobe.config: 型付き設定のエントリーポイント."""

from .probe_config import DEFAULT_MODEL_NAME, ProbeConfig
from .sub_configs import RetryPolicy

__all__ = ["DEFAULT_MODEL_NAME", "ProbeConfig", "RetryPolicy"]
