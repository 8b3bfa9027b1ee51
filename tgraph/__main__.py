"""Entry point for ``python -m tgraph``."""

import sys

from tgraph.cli import main

if __name__ == "__main__":
    sys.exit(main())
