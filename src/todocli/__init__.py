"""todocli - A small command-line todo list manager.

Tasks live in a JSON file either next to the current working directory
(``.todos.json``) or in the user's home (``~/.todo/todos.json``), each with
a companion archive store.

Installation:
    # Standalone (recommended)
    uv tool install .

    # From workspace
    uv pip install -e .
"""

__version__ = "1.1.0"
__release_date__ = "2025-08-04"
