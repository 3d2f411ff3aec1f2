"""Notifiers rendering user-facing messages."""

import logging

logger = logging.getLogger("tome-sync")


class LogNotifier:
    """Notifier that writes messages to the application logger."""

    def info(self, message: str) -> None:
        logger.info(message)

    def warn(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)


class CollectingNotifier(LogNotifier):
    """Logs messages and keeps them, so a tool can return them to its caller."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))
        super().info(message)

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))
        super().warn(message)

    def error(self, message: str) -> None:
        self.messages.append(("error", message))
        super().error(message)

    def render(self) -> str:
        return "\n".join(message for _, message in self.messages)
