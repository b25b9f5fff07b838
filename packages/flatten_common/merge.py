"""
flatten_common.merge

Compose discovery -> normalize -> pragma fold -> import dedupe -> write
into flattening jobs. Two jobs are configured:
  - contracts: every contract source except mocks
  - tests:     test sources (+ injected deploy helper) followed by mocks

Each job owns its own MergeState; nothing is shared between jobs, so a
failing job never affects the other one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from flatten_common import paths
from flatten_common.discovery import discover_sources, name_contains, name_excludes
from flatten_common.flatten_config import FlattenConfig
from flatten_common.imports import ImportDedupState, dedupe_external_imports
from flatten_common.normalizer import normalize_source
from flatten_common.pragma import PragmaState, reduce_pragmas
from flatten_common.sol_patterns import BLANK_RUN_RE

logger = logging.getLogger(__name__)

JOB_CONTRACTS = "contracts"
JOB_TESTS = "tests"
JOB_NAMES = (JOB_CONTRACTS, JOB_TESTS)


class FlattenJobError(RuntimeError):
    pass


@dataclass(frozen=True)
class SourceFile:
    path: Path
    raw_text: str


@dataclass(frozen=True)
class MergeJob:
    name: str
    files: Sequence[Path]
    output_path: Path


@dataclass
class MergeState:
    pragma: PragmaState = field(default_factory=PragmaState)
    imports: ImportDedupState = field(default_factory=ImportDedupState)
    removed: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class MergedArtifact:
    output_path: Path
    text: str
    file_count: int

    @property
    def byte_size(self) -> int:
        return len(self.text.encode("utf-8"))


@dataclass
class FlattenReport:
    artifacts: Dict[str, MergedArtifact] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def read_source(path: Path | str) -> SourceFile:
    p = Path(path)
    try:
        return SourceFile(path=p, raw_text=p.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise FlattenJobError(f"failed to read {p}: {exc}") from exc


def merge_sources(
    files: Iterable[SourceFile],
    output_path: Path | str,
    *,
    state: Optional[MergeState] = None,
) -> MergedArtifact:
    """
    Fold sources (in the given order) into one artifact text. Does not write.
    """
    if state is None:
        state = MergeState()
    chunks: List[str] = []
    count = 0
    for src in files:
        normalized = normalize_source(src.raw_text)
        for key, n in normalized.removed_counts.items():
            state.removed[key] = state.removed.get(key, 0) + n
        # a dropped directive leaves an empty line behind
        reduced = BLANK_RUN_RE.sub("\n", reduce_pragmas(normalized.text, state.pragma)).strip()
        chunks.append(reduced + "\n")
        count += 1
    merged = dedupe_external_imports("".join(chunks), state.imports)
    return MergedArtifact(output_path=Path(output_path), text=merged.strip(), file_count=count)


def write_artifact(artifact: MergedArtifact) -> Path:
    out = artifact.output_path
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(artifact.text, encoding="utf-8")
    except OSError as exc:
        raise FlattenJobError(f"failed to write {out}: {exc}") from exc
    return out


def flatten_job(job: MergeJob) -> MergedArtifact:
    # read everything first: a file vanishing mid-job aborts before any write
    sources = [read_source(p) for p in job.files]
    state = MergeState()
    artifact = merge_sources(sources, job.output_path, state=state)
    write_artifact(artifact)
    logger.info(
        "Merged %d contracts into %s (%d bytes)",
        artifact.file_count,
        artifact.output_path,
        artifact.byte_size,
    )
    logger.debug("%s: version directive: %s", job.name, state.pragma.directive or "(none)")
    if state.removed:
        logger.debug(
            "%s: removed %s",
            job.name,
            ", ".join(f"{key}={n}" for key, n in sorted(state.removed.items())),
        )
    if state.imports.dropped:
        logger.debug("%s: dropped %d duplicate external imports", job.name, state.imports.dropped)
    return artifact


def build_jobs(config: FlattenConfig, root: Optional[Path] = None) -> List[MergeJob]:
    """
    Discover sources for both jobs. Mock files (name contains `config.mock_marker`)
    go to the tests job only; all other contract files go to the contracts job only.
    """
    base = root if root is not None else paths.repo_root()
    contracts_root = paths.as_repo_path(config.contracts_dir, root=base)
    tests_root = paths.as_repo_path(config.tests_dir, root=base)
    out_dir = paths.as_repo_path(config.output_dir, root=base)
    common = {"suffix": config.source_suffix, "listing_order": config.listing_order}

    production = discover_sources(contracts_root, name_excludes(config.mock_marker), **common)
    tests = discover_sources(
        tests_root,
        extra_paths=[paths.as_repo_path(p, root=base) for p in config.test_extra_paths],
        **common,
    )
    mocks = discover_sources(contracts_root, name_contains(config.mock_marker), **common)

    return [
        MergeJob(name=JOB_CONTRACTS, files=production, output_path=out_dir / config.contracts_artifact),
        MergeJob(name=JOB_TESTS, files=tests + mocks, output_path=out_dir / config.tests_artifact),
    ]


def run_flatten(
    config: FlattenConfig,
    root: Optional[Path] = None,
    *,
    only: Optional[Iterable[str]] = None,
) -> FlattenReport:
    """
    Build and run the flatten jobs. Discovery errors (missing roots) propagate;
    a read/write failure only fails its own job.
    """
    wanted = set(only) if only else set(JOB_NAMES)
    unknown = wanted - set(JOB_NAMES)
    if unknown:
        raise ValueError(f"unknown job(s): {', '.join(sorted(unknown))}")

    report = FlattenReport()
    for job in build_jobs(config, root):
        if job.name not in wanted:
            continue
        try:
            report.artifacts[job.name] = flatten_job(job)
        except FlattenJobError as exc:
            logger.error("%s: flatten failed: %s", job.name, exc)
            report.failures[job.name] = str(exc)
    return report
