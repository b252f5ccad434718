"""Allow blackbeard to be executable through `python -m blackbeard`."""
from blackbeard.cli import main


if __name__ == "__main__":  # pragma: no cover
    main()
