from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from flatten_common.sol_patterns import VERSION_DIRECTIVE_RE


@dataclass
class PragmaState:
    """Per-job flag: has a version directive already made it into the artifact?"""

    emitted: bool = False
    directive: Optional[str] = None


def reduce_pragmas(text: str, state: PragmaState) -> str:
    """
    Remove version directives so that, across a whole job, only the first one survives.
    Mutates `state`; one state object per job.
    """

    def _repl(m: re.Match[str]) -> str:
        if state.emitted:
            return ""
        state.emitted = True
        state.directive = m.group(0)
        return m.group(0)

    return VERSION_DIRECTIVE_RE.sub(_repl, text or "")
