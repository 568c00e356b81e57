"""Allow ``python -m snaptree``."""

import sys

from .cli import main

sys.exit(main())
