#!/usr/bin/env python3

from ratekeeper.cli.interface import run_cli


def main() -> None:
    """Entry point for ratekeeper CLI."""
    run_cli()


if __name__ == "__main__":
    main()
