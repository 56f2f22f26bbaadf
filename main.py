"""Main entry point for rwrsgateway."""

from rwrsgateway.cli import app


def main() -> None:
    """Run the rwrsgateway command line."""
    app()


if __name__ == "__main__":
    main()
