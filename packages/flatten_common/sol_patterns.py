"""
Structural matchers for Solidity source text.

Flattening is a textual transform: these regexes are the only place that
knows what a license line, an import, or a version directive looks like.
Everything else goes through the predicates/extractors below.
"""

from __future__ import annotations

import re
from typing import Optional

# e.g. // SPDX-License-Identifier: MIT
LICENSE_LINE_RE = re.compile(r"^//\s*SPDX-License-Identifier:.*$", flags=re.MULTILINE)

# e.g. import {A, B} from "./A.sol";
RELATIVE_IMPORT_BRACED_RE = re.compile(
    r"""^import\s+\{[^}]+\}\s+from\s+(["'])\.{1,2}/.*?\1;\s*$""",
    flags=re.MULTILINE,
)
# e.g. import "../lib/B.sol";
RELATIVE_IMPORT_BARE_RE = re.compile(r"""^import\s+(["'])\.{1,2}/.*?\1;\s*$""", flags=re.MULTILINE)

# /* ... */ (non-greedy, non-nested)
BLOCK_COMMENT_RE = re.compile(r"/\*[^*]*\*+(?:[^/*][^*]*\*+)*/")
_BOILERPLATE_WORDS_RE = re.compile(r"copyright|file:", flags=re.IGNORECASE)

# e.g. // File: contracts/A.sol
FILE_MARKER_RE = re.compile(r"//\s*File:.*", flags=re.IGNORECASE)

# e.g. pragma solidity ^0.8.0;
VERSION_DIRECTIVE_RE = re.compile(r"pragma solidity [^;]+;")

# newline, optional whitespace, newline
BLANK_RUN_RE = re.compile(r"\n\s*\n")

# import "x/Y.sol"; / import {Y} from "x/Y.sol";
IMPORT_STATEMENT_RE = re.compile(r"""import\s+(?:\{[^}]+\}\s+from\s+)?["']([^"']+)["'];""")


def is_boilerplate_comment(block: str) -> bool:
    return bool(_BOILERPLATE_WORDS_RE.search(block or ""))


def is_version_directive(text: str) -> bool:
    return bool(VERSION_DIRECTIVE_RE.search(text or ""))


def is_import_line(line: str) -> bool:
    return (line or "").strip().startswith("import ")


def import_target(line: str) -> Optional[str]:
    """
    Return the quoted path of an import line, or None when the line
    is not a well-formed import statement.
    """
    if not is_import_line(line):
        return None
    m = IMPORT_STATEMENT_RE.search(line)
    if not m:
        return None
    return m.group(1)


def is_relative_target(target: str) -> bool:
    return (target or "").startswith(".")
