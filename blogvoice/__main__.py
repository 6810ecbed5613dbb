"""Module entrypoint for running Blogvoice as ``python -m blogvoice``."""

from __future__ import annotations

from blogvoice.cli import main


if __name__ == "__main__":
    main()
