"""Allow ``python -m sexpstream``."""

import sys

from sexpstream.cli import main

sys.exit(main())
