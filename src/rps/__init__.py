"""rps - Remote ps.

Fetches process tables from remote agents and renders them as a
``ps aux``-style report.
"""

import logging

__version__ = "0.1.0"

# Library default: stay quiet unless the CLI configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["__version__"]
