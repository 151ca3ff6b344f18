"""List and heading defaults"""

DEFAULT_LIST_TITLE = "Inbox"
DEFAULT_HEADING_TITLE = "Default"

MAX_TITLE_LENGTH = 255


def normalize_title(title: str | None) -> str:
    return (title or "").strip()
