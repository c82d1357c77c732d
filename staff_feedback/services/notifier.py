"""
User-facing notifications.
"""
from dataclasses import dataclass, asdict
from typing import List

SUCCESS = "success"
INFO = "info"
WARNING = "warning"
ERROR = "error"


@dataclass
class Notification:
    title: str
    description: str = ""
    severity: str = INFO

    def to_dict(self) -> dict:
        return asdict(self)


class Notifier:
    """
    Fire-and-forget "show message" collaborator.

    Subclasses decide where messages go; the helpers only pick the severity.
    """

    def notify(self, title: str, description: str = "", severity: str = INFO) -> None:
        raise NotImplementedError

    def success(self, title: str, description: str = "") -> None:
        self.notify(title, description, SUCCESS)

    def warning(self, title: str, description: str = "") -> None:
        self.notify(title, description, WARNING)

    def error(self, title: str, description: str = "") -> None:
        self.notify(title, description, ERROR)


class CollectingNotifier(Notifier):
    """
    Buffers notifications until the web layer hands them to the browser.
    """

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, title: str, description: str = "", severity: str = INFO) -> None:
        self.notifications.append(Notification(title, description, severity))

    def drain(self) -> List[Notification]:
        """
        Return and clear the buffered notifications.

        Returns:
            List[Notification]: Notifications in the order they were raised
        """
        drained, self.notifications = self.notifications, []
        return drained
