"""Allow running mx with python -m mx."""

from mx.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
