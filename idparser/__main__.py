"""
Module entry point for: python -m idparser

Allows running the parser directly as a module:
    python -m idparser extract <text_file> [options]
    python -m idparser kyc <front_file> <back_file> [options]
    python -m idparser batch <directory> [options]
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
