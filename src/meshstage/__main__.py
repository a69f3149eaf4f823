"""Command-line interface."""
from meshstage.main import main

if __name__ == "__main__":
    raise SystemExit(main())
