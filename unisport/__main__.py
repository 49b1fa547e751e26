"""
Package entry point.

Allows running the application via:

    python -m unisport

This simply forwards execution to unisport.cli.main().
"""

from unisport.cli import main

if __name__ == "__main__":
    main()
