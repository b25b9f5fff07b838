from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from flatten_common.sol_patterns import import_target, is_relative_target


@dataclass
class ImportDedupState:
    seen: Set[str] = field(default_factory=set)
    dropped: int = 0


def dedupe_external_imports(text: str, state: Optional[ImportDedupState] = None) -> str:
    """
    Drop repeated external import lines (first occurrence wins, compared on the stripped line).

    Relative imports, malformed imports and every other line pass through unchanged.
    """
    if state is None:
        state = ImportDedupState()
    kept: List[str] = []
    for line in (text or "").split("\n"):
        target = import_target(line)
        if target is not None and not is_relative_target(target):
            key = line.strip()
            if key in state.seen:
                state.dropped += 1
                continue
            state.seen.add(key)
        kept.append(line)
    return "\n".join(kept)
