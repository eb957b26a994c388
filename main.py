"""Backward compatible wrapper.

The project has been packaged. Use the console script `harvest-hours` now.
Running this module directly delegates to `harvest_hours.cli.main`.
"""

import sys

from harvest_hours.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
