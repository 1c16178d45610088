from __future__ import annotations
from typing import Optional, Protocol


class ReplySuggester(Protocol):
    def generate(self, body: str, context: Optional[str] = None) -> list[str]: ...
