"""Run the harness CLI with ``python -m booker``."""

from booker.cli.main import main

if __name__ == "__main__":
    main()
