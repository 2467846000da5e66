"""
Package entry point.

Allows running the application via:

    python -m untisplan

This simply forwards execution to untisplan.cli.main().
"""

from untisplan.cli import main

if __name__ == "__main__":
    main()
