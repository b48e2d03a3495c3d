"""
Entry point for running the package as a module: python -m taxdocs
"""

import sys
from taxdocs.cli import main

if __name__ == "__main__":
    sys.exit(main())
