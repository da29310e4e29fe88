"""
Runtime settings read from the environment.
"""

import os

DEBUG = bool(os.environ.get("OPAK_DEBUG"))

try:
    DEFAULT_INDEX_FORMAT = int(os.environ.get("OPAK_INDEX_FORMAT", "1"))
except ValueError:
    DEFAULT_INDEX_FORMAT = 1
