from __future__ import annotations

import logging
from importlib.metadata import version

__version__ = version("mincov")

logger = logging.getLogger("mincov")

__all__ = ["__version__", "logger"]
