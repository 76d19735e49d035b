from __future__ import annotations

from typing import Dict, Iterable, Protocol


class Exporter(Protocol):
    def export(self, data: Dict[str, Iterable[str]], path: str) -> None:
        ...
