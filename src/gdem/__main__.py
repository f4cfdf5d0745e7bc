"""Module entrypoint for `python -m gdem`."""

from __future__ import annotations

from gdem.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
