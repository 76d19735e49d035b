from __future__ import annotations

import json
from typing import Dict, Iterable
from pathlib import Path


class JSONExporter:
    """Writes ``{seed: [product URLs]}`` with URLs sorted for stable diffs."""

    def export(self, data: Dict[str, Iterable[str]], path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            serializable = {seed: sorted(urls) for seed, urls in data.items()}
            json.dump(serializable, f, indent=2, ensure_ascii=False)
