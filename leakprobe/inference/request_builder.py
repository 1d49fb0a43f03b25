"""エコーモデル向けの固定リクエストを組み立てる."""

import numpy as np

from leakprobe.config import ProbeConfig
from leakprobe.inference.types import InferOptions, InputTensor, OutputSpec

INPUT_NAME = "INPUT0"
OUTPUT_NAME = "OUTPUT0"
INPUT_DIM = 16
INT32_BYTE_SIZE = 4
INPUT_DATATYPE = "INT32"
INPUT_SHAPE = (1, INPUT_DIM)


def build_input_tensor() -> InputTensor:
    """値 0..15 を持つ [1, 16] の INT32 入力テンソルを作成する.

    Returns:
        読み取り専用配列を保持する入力テンソル.
    """
    data = np.arange(INPUT_DIM, dtype="<i4").reshape(INPUT_SHAPE)
    data.setflags(write=False)
    return InputTensor(
        name=INPUT_NAME,
        shape=INPUT_SHAPE,
        datatype=INPUT_DATATYPE,
        data=data,
    )


def build_output_spec() -> OutputSpec:
    """返却を要求する出力を作成する."""
    return OutputSpec(name=OUTPUT_NAME)


def build_infer_options(config: ProbeConfig) -> InferOptions:
    """設定から推論オプションを作成する.

    Args:
        config: プローブ設定.

    Returns:
        全繰り返しで共有する推論オプション.
    """
    return InferOptions(
        model_name=config.model_name,
        model_version=config.model_version,
        client_timeout_us=config.client_timeout_us,
    )
