"""エコーモデルの推論結果を入力と突き合わせて検証するサービス."""

import sys
from typing import Optional, TextIO

import numpy as np

from leakprobe.inference.errors import (
    ByteSizeMismatchError,
    DatatypeMismatchError,
    InferenceRequestError,
    ResponseValidationError,
    ShapeMismatchError,
    ValueMismatchError,
)
from leakprobe.inference.request_builder import OUTPUT_NAME
from leakprobe.inference.types import InferResultView, InputTensor, OutputTensor


class ResponseValidator:
    """形状, データ型, バイト長, 値の順に出力を検証する.

    検証に1つでも失敗した時点で例外を送出する. 全て成功した場合のみ
    レスポンス全体のデバッグ表現を標準出力へ書き出す.
    """

    def __init__(
        self,
        expected: InputTensor,
        output_name: str = OUTPUT_NAME,
        stream: Optional[TextIO] = None,
    ) -> None:
        """検証の期待値を受け取って初期化する.

        Args:
            expected: 送信した入力テンソル. 出力はこれと完全一致する必要がある.
            output_name: 検証対象の出力名.
            stream: デバッグ表現の出力先. Noneなら呼び出し時点の標準出力.
        """
        self.expected = expected
        self.output_name = output_name
        self._stream = stream
        self._expected_values = np.asarray(expected.data).reshape(-1)

    def validate(self, result: InferResultView) -> None:
        """推論結果を検証する.

        Args:
            result: 推論結果.

        Raises:
            InferenceRequestError: サーバーがリクエスト失敗を報告した場合.
            ResponseValidationError: 出力が期待値と一致しない場合.
        """
        if not result.status.ok:
            raise InferenceRequestError(f"Inference failed: {result.status}")

        try:
            output = result.output(self.output_name)
        except KeyError as e:
            raise ResponseValidationError(
                f"unable to get result data for '{self.output_name}'"
            ) from e

        self._validate_shape_and_datatype(output)
        self._validate_values(output)

        print(result.debug_string, file=self._stream or sys.stdout)

    def _validate_shape_and_datatype(self, output: OutputTensor) -> None:
        """形状とデータ型を検証する."""
        if tuple(output.shape) != tuple(self.expected.shape):
            raise ShapeMismatchError(
                f"received incorrect shapes for '{output.name}': {list(output.shape)}"
            )
        if output.datatype != self.expected.datatype:
            raise DatatypeMismatchError(
                f"received incorrect datatype for '{output.name}': {output.datatype}"
            )

    def _validate_values(self, output: OutputTensor) -> None:
        """バイト長と要素ごとの値を検証する."""
        if output.byte_size != self.expected.byte_size:
            raise ByteSizeMismatchError(
                f"received incorrect byte size for '{output.name}': "
                f"{output.byte_size}"
            )

        if output.values is None or output.values.size != self._expected_values.size:
            raise ValueMismatchError("incorrect output")
        for i, expected_value in enumerate(self._expected_values):
            if output.values[i] != expected_value:
                raise ValueMismatchError(
                    f"incorrect output: index {i} expected {expected_value}, "
                    f"got {output.values[i]}"
                )
