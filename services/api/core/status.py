from __future__ import annotations

from enum import Enum
from typing import Optional


class DocumentStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    UNAVAILABLE = "unavailable"   # terminal: the renderer could not load the document


class DocumentState:
    """
    Render state of the document behind an editor/viewer.

    UNAVAILABLE is terminal; recovering means building a new context.
    """

    def __init__(self) -> None:
        self.status = DocumentStatus.LOADING
        self.error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.status is DocumentStatus.READY

    @property
    def unavailable(self) -> bool:
        return self.status is DocumentStatus.UNAVAILABLE

    def loaded(self) -> bool:
        if self.unavailable:
            return False
        self.status = DocumentStatus.READY
        self.error = None
        return True

    def failed(self, error: object) -> None:
        self.status = DocumentStatus.UNAVAILABLE
        self.error = str(error) or "Failed to load document"
