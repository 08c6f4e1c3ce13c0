"""
Main entry point for the arcgis_gateway package.

Allows running the CLI as: python -m arcgis_gateway
"""

import sys

from arcgis_gateway.cli import main

if __name__ == "__main__":
    sys.exit(main())
