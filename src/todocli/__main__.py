"""Main entry point for the todo CLI.

Supports both direct invocation (`python -m todocli`) and the `todo`
console script.
"""

from todocli.cli import main

if __name__ == "__main__":
    main()
