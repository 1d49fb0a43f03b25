"""`python -m leakprobe` のエントリーポイント."""

import sys

from leakprobe.cli.probe import main

sys.exit(main())
