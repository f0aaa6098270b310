"""Entry point for ``python -m session_trace``."""

from .cli import main

if __name__ == "__main__":
    main()
