#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Drop images into ``images/`` and run:

    python main.py batch

Or dither one file:

    python -m pixel_dither.cli single photo.png -m atkinson -c "#000000,#ffffff"
    python -m pixel_dither.cli methods
"""

from pixel_dither.cli import app

if __name__ == "__main__":
    app()
