"""Run the dsplab CLI: python -m dsplab <command>."""

import sys

from dsplab.cli import main

sys.exit(main())
