# codepack/main.py
"""Main entry point for the codepack CLI application."""

from codepack.cli.interface import main_cli


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli(prog_name="codepack")

if __name__ == '__main__':
    entrypoint()
