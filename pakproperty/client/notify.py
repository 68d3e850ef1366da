from typing import List, Protocol, Tuple

from structlog import get_logger

logger = get_logger()

class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

class LogNotifier:
    """Transient notifications: logged and kept for whoever renders them."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))
        logger.info("Notification", kind="success", text=message)

    def error(self, message: str) -> None:
        self.messages.append(("error", message))
        logger.warning("Notification", kind="error", text=message)
