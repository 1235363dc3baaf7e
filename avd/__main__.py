"""Module entrypoint for ``python -m avd``."""

from avd.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
