"""Entry point for running sciletter as a module or installed script.

Usage:
    sciletter / python -m sciletter                → HTTP API (uvicorn)
    sciletter <command> ... / python -m sciletter <command> ... → CLI
"""

import sys

import uvicorn


def run() -> None:
    """Entry point: no args → API server, else → CLI."""
    if len(sys.argv) == 1:
        uvicorn.run("sciletter.api.app:app", host="127.0.0.1", port=8000)
    else:
        from sciletter.cli import main
        main()


if __name__ == "__main__":
    run()
