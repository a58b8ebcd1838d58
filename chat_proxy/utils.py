import time
from typing import Callable, List, Optional

from .errors import ErrorKind

ErrorClassifier = Callable[[int, str], Optional[ErrorKind]]

BALANCE_PATTERNS: List[str] = [
    "insufficient balance",
]


def includes_any(text: str, patterns: List[str]) -> bool:
    low = text.lower()
    return any(p in low for p in patterns)


def classify_provider_error(status_code: int, body: str) -> Optional[ErrorKind]:
    """Default classifier for DeepSeek-style providers.

    The balance check runs regardless of status so that in-band balance
    messages on a 200 response can be detected too.
    """
    if includes_any(body or "", BALANCE_PATTERNS):
        return ErrorKind.INSUFFICIENT_BALANCE
    if status_code >= 400:
        return ErrorKind.UPSTREAM_HTTP
    return None


def new_conversation_id() -> str:
    return f"session-{int(time.time() * 1000)}"


def preview(text: str, limit: int = 20) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
