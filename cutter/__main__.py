"""
Main entry point for running the package as a module.

Usage:
    python -m cutter run --path ./gallery
    python -m cutter run --fetch-remote --s3-bucket photos --s3-prefix gallery
    python -m cutter plan --path ./gallery
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
