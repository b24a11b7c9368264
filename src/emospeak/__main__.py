"""Entry point for running emospeak as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the emospeak CLI application."""
    app()


if __name__ == "__main__":
    main()
