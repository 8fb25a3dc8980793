"""User-facing notifications raised by the build pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

CLEAN_INSTALL_ERROR_NOTIFICATION = (
    "Could not run the Maven clean install command to build your project. "
    "See the build logs for details."
)
BUILD_SUCCEEDED_NOTIFICATION = (
    "Built your project and staged its dependencies. Starting the transformation."
)


class Notifier(Protocol):
    """Shows messages and documents to the user."""

    async def show_error(self, message: str) -> None: ...

    async def show_info(self, message: str) -> None: ...

    async def open_document(self, path: Path) -> None: ...


class LoggingNotifier:
    """Notifier that logs and remembers what it was asked to show."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []
        self.opened_documents: list[Path] = []

    async def show_error(self, message: str) -> None:
        self.messages.append(("error", message))
        logger.error(message)

    async def show_info(self, message: str) -> None:
        self.messages.append(("info", message))
        logger.info(message)

    async def open_document(self, path: Path) -> None:
        self.opened_documents.append(path)
        logger.info(f"Build logs written to {path}")
