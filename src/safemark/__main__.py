"""Entry point for `python -m safemark` and `safemark` CLI."""

from safemark.cli.app import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
