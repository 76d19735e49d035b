from __future__ import annotations

import csv
from typing import Dict, Iterable
from pathlib import Path


class CSVExporter:
    """
    Writes one row per discovered product URL.
    """

    _headers = ["seed", "url"]

    def export(self, data: Dict[str, Iterable[str]], path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            w.writerow(self._headers)
            for seed, urls in data.items():
                for url in sorted(urls):
                    w.writerow([seed, url])
