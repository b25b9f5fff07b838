from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Tuple

from flatten_common import sol_patterns as sp


@dataclass(frozen=True)
class NormalizeResult:
    text: str
    removed_counts: Dict[str, int]


def normalize_source(text: str) -> NormalizeResult:
    """
    Strip per-file boilerplate before a source joins the merge buffer.

    Order matters (later rules assume earlier ones already ran):
      1. SPDX license lines
      2. relative imports (braced + bare), since their content gets inlined
      3. block comments mentioning "copyright" / "file:"
      4. `// File: ...` markers
      5. repeated version directives within this file (first one kept)
      6. blank-line runs -> single newline
      7. trim
    """
    src = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    removed: Dict[str, int] = {}

    def _subn(pattern: re.Pattern[str], repl, s: str, key: str) -> Tuple[str, int]:
        out, n = pattern.subn(repl, s)
        if n:
            removed[key] = removed.get(key, 0) + n
        return out, n

    def _drop_boilerplate(m: re.Match[str]) -> str:
        block = m.group(0)
        if sp.is_boilerplate_comment(block):
            removed["boilerplate_comment"] = removed.get("boilerplate_comment", 0) + 1
            return ""
        return block

    first_seen = False

    def _keep_first_directive(m: re.Match[str]) -> str:
        nonlocal first_seen
        if not first_seen:
            first_seen = True
            return m.group(0)
        removed["version_directive"] = removed.get("version_directive", 0) + 1
        return ""

    out = src
    out, _ = _subn(sp.LICENSE_LINE_RE, "", out, "license")
    out, _ = _subn(sp.RELATIVE_IMPORT_BRACED_RE, "", out, "relative_import")
    out, _ = _subn(sp.RELATIVE_IMPORT_BARE_RE, "", out, "relative_import")
    out = sp.BLOCK_COMMENT_RE.sub(_drop_boilerplate, out)
    out, _ = _subn(sp.FILE_MARKER_RE, "", out, "file_marker")
    out = sp.VERSION_DIRECTIVE_RE.sub(_keep_first_directive, out)
    out = sp.BLANK_RUN_RE.sub("\n", out)
    out = out.strip()

    return NormalizeResult(text=out, removed_counts=removed)
