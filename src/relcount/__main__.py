"""Allow running relcount as ``python -m relcount``."""

import sys

from .cli import main

sys.exit(main())
