"""Entry point for `python -m reviewbar`."""

import logging

from textual.logging import TextualHandler

from reviewbar.app import ReviewbarApp
from reviewbar.config import settings


def main() -> None:
    """Run the REVIEWBAR TUI."""
    logging.basicConfig(level=settings.LOG_LEVEL, handlers=[TextualHandler()])
    ReviewbarApp().run()


if __name__ == "__main__":
    main()
