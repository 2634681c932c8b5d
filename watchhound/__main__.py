"""Module entrypoint for ``python -m watchhound``."""

from .cli import main


if __name__ == "__main__":
    main()
