"""Module wrapper so running ``python -m dockomatic.cli`` matches the console script."""

from dockomatic.cli import main


if __name__ == "__main__":  # pragma: no cover
    main()
