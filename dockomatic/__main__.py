"""Make the package runnable with ``python -m dockomatic``."""

from dockomatic.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
