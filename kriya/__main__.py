"""Entry point for running Kriya as a module: python -m kriya"""

import sys
from .ui import main

if __name__ == "__main__":
    sys.exit(main())
