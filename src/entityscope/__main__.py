"""entityscope CLI entry point.

This module enables running entityscope as:
    python -m entityscope <command>
"""

from entityscope.cli import main

if __name__ == "__main__":
    main()
