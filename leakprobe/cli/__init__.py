"""leakprobe.cli: コマンドラインインターフェース."""
