"""Reader for the Java-style ``e2e.properties`` file.

The harness shares its property file format with the Lutece tooling, so the
parser accepts ``key=value`` and ``key: value`` lines, ``#``/``!`` comments and
quoted values. Continuation lines and unicode escapes are not supported.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict


def parse_properties(text: str) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line[0] in ("#", "!"):
            continue
        separators = [pos for pos in (line.find("="), line.find(":")) if pos > 0]
        if not separators:
            continue
        split_at = min(separators)
        key, value = line[:split_at].strip(), line[split_at + 1:].strip()
        if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
            value = value[1:-1]
        properties[key] = value
    return properties


@lru_cache(maxsize=4)
def load_properties(path: Path) -> Dict[str, str]:
    """Parse ``path`` once; a missing file yields an empty mapping."""
    if not path.exists():
        return {}
    return parse_properties(path.read_text(encoding="utf-8"))
