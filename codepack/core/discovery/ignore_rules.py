# codepack/core/discovery/ignore_rules.py
"""
Loading and evaluation of .gitignore-style exclusion rules.

Rules are collected by walking upwards from the packed directory until a
repository marker (`.git`) is found, so pointing the tool at a subdirectory
of a repository still honours the repository-wide ignore files. Matching is
deliberately simpler than git's: every pattern is a shell glob applied to
the path relative to the repository root, and patterns containing `**` get
an extra per-component check with `**` collapsed to `*`.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Tuple, Union

import structlog

from codepack.config.settings import DEFAULT_IGNORE_FILE_NAME, DEFAULT_REPO_MARKER_NAME
from codepack.core.discovery.glob_match import glob_match
from codepack.exceptions import GlobPatternError, IgnoreFileError

log = structlog.get_logger(__name__)

# directories that are never packed, whatever the ignore files say.
DEFAULT_EXCLUDED_NAMES: FrozenSet[str] = frozenset({
    "node_modules",
    "vendor",
    "build",
    "dist",
    "target",
    "bin",
    "obj",
    ".git",
    ".idea",
    ".vscode",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
})


@dataclass(frozen=True)
class IgnoreRuleSet:
    """
    An immutable set of ignore patterns anchored at a base directory.

    `patterns` keeps discovery order: the starting directory's own ignore
    file first, then each ancestor's up to the repository root.
    """
    base_dir: Path
    patterns: Tuple[str, ...] = ()
    default_excludes: FrozenSet[str] = field(default=DEFAULT_EXCLUDED_NAMES)

    def relative_path_str(self, path: Union[str, Path]) -> Optional[str]:
        # returns None when the path is not inside base_dir.
        path_str = os.fspath(path)
        if not os.path.isabs(path_str):
            return None
        try:
            rel = Path(os.path.normpath(path_str)).relative_to(self.base_dir)
        except ValueError:
            return None
        return str(rel)

    def should_ignore(self, path: Union[str, Path]) -> bool:
        """
        Decides whether an absolute path is excluded from packing.

        Paths that cannot be expressed relative to `base_dir` are never
        ignored. For a directory, True means the whole subtree is skipped.
        """
        rel_path = self.relative_path_str(path)
        if rel_path is None:
            log.debug("ignore_check_path_outside_base", path=str(path), base_dir=str(self.base_dir))
            return False

        path_parts = rel_path.split(os.sep)
        for part in path_parts:
            if part in self.default_excludes:
                return True

        for pattern in self.patterns:
            if _safe_glob_match(pattern, rel_path):
                return True

            # `**` only gets an approximation: the pattern with `**` turned
            # into `*` is tried against every single component.
            if "**" in pattern:
                component_pattern = pattern.replace("**", "*")
                if any(_safe_glob_match(component_pattern, part) for part in path_parts):
                    return True

        return False


def _safe_glob_match(pattern: str, name: str) -> bool:
    # malformed patterns never match.
    try:
        return glob_match(pattern, name)
    except GlobPatternError as e:
        log.debug("malformed_ignore_pattern_skipped", pattern=pattern, error=str(e))
        return False


def parse_ignore_lines(lines: Iterable[str]) -> List[str]:
    # drops blank lines and `#` comments, keeps everything else verbatim (stripped).
    patterns: List[str] = []
    for raw_line in lines:
        line = raw_line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def load_ignore_rules(
    start_dir: Union[str, Path],
    ignore_file_name: str = DEFAULT_IGNORE_FILE_NAME,
    repo_marker_name: str = DEFAULT_REPO_MARKER_NAME,
    default_excludes: Optional[Iterable[str]] = None,
) -> IgnoreRuleSet:
    """
    Builds an IgnoreRuleSet by ascending from `start_dir` to the repository root.

    Each directory's ignore file (if present) is read before checking for the
    repository marker, so the repository root's own ignore file is included.
    The ruleset is anchored at the directory holding the marker, or at
    `start_dir` when no marker exists up to the filesystem root.

    Raises:
        IgnoreFileError: an existing ignore file could not be opened, read or
            decoded. The error's `partial` attribute holds the ruleset built
            from the files read before the failure, anchored at `start_dir`.
    """
    start_path = Path(os.path.abspath(os.fspath(start_dir)))
    excludes = DEFAULT_EXCLUDED_NAMES if default_excludes is None else frozenset(default_excludes)
    patterns: List[str] = []

    current_dir = start_path
    while True:
        ignore_file = current_dir / ignore_file_name
        if ignore_file.is_file():
            try:
                with ignore_file.open("r", encoding="utf-8") as f_obj:
                    file_patterns = parse_ignore_lines(f_obj)
            except (OSError, UnicodeDecodeError) as e:
                partial = IgnoreRuleSet(base_dir=start_path, patterns=tuple(patterns), default_excludes=excludes)
                raise IgnoreFileError(
                    f"error reading {ignore_file}: {e}", path=ignore_file, partial=partial
                ) from e
            log.debug("ignore_file_loaded", path=str(ignore_file), pattern_count=len(file_patterns))
            patterns.extend(file_patterns)

        if (current_dir / repo_marker_name).exists():
            log.info("repository_root_found", base_dir=str(current_dir), pattern_count=len(patterns))
            return IgnoreRuleSet(base_dir=current_dir, patterns=tuple(patterns), default_excludes=excludes)

        parent_dir = current_dir.parent
        if parent_dir == current_dir:
            break
        current_dir = parent_dir

    log.info("no_repository_root_found", base_dir=str(start_path), pattern_count=len(patterns))
    return IgnoreRuleSet(base_dir=start_path, patterns=tuple(patterns), default_excludes=excludes)
