# codepack/core/discovery/walker.py
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional

import structlog

from codepack.config.comment_styles import CommentStyle, comment_style_for
from codepack.core.discovery.ignore_rules import IgnoreRuleSet
from codepack.core.discovery.pattern_matching import compile_exclude_spec, is_path_excluded
from codepack.exceptions import DiscoveryError

log = structlog.get_logger(__name__)


class WalkDecision(Enum):
    PACK = "pack"
    IGNORED = "ignored"
    EXCLUDED = "excluded"
    SYMLINK = "symlink"
    OUTPUT_FILE = "output_file"
    NOT_CODE = "not_code"


@dataclass(frozen=True)
class WalkEntry:
    path: Path
    decision: WalkDecision
    is_dir: bool = False
    comment_style: Optional[CommentStyle] = None


def walk_code_files(
    root: Path,
    rules: Optional[IgnoreRuleSet],
    exclude_patterns: Optional[List[str]] = None,
    output_path: Optional[Path] = None,
) -> Iterator[WalkEntry]:
    """
    Walks `root` depth-first in lexical order, yielding a decision per entry.

    Entries of one directory are visited sorted by name, files and
    subdirectories interleaved. Directories only show up when they are
    skipped (ignored or symlinked); an ignored directory is never entered.
    Files to write carry `WalkDecision.PACK` and their comment style.
    `rules=None` disables ignore filtering entirely, built-in exclusions
    included.
    """
    log.info("directory_walk_started", root=str(root), ignore_rules=rules is not None)
    exclude_spec = compile_exclude_spec(exclude_patterns or [])

    if rules is not None and rules.should_ignore(root):
        yield WalkEntry(root, WalkDecision.IGNORED, is_dir=True)
        return
    yield from _walk_directory(root, root, rules, exclude_spec, output_path)


def _walk_directory(directory: Path, root: Path, rules, exclude_spec, output_path) -> Iterator[WalkEntry]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise DiscoveryError(f"error walking directory {directory}: {e}") from e

    for entry in entries:
        entry_path = Path(entry.path)
        is_dir = entry.is_dir(follow_symlinks=False)
        if rules is not None and rules.should_ignore(entry_path):
            yield WalkEntry(entry_path, WalkDecision.IGNORED, is_dir=is_dir)
        elif entry.is_symlink():
            yield WalkEntry(entry_path, WalkDecision.SYMLINK)
        elif is_dir:
            yield from _walk_directory(entry_path, root, rules, exclude_spec, output_path)
        else:
            yield _classify_file(entry_path, root, exclude_spec, output_path)


def _same_path(file_path: Path, output_path: Path) -> bool:
    if os.path.normpath(file_path) == os.path.normpath(output_path):
        return True
    try:
        return os.path.samefile(file_path, output_path)
    except OSError:
        return False


def _classify_file(file_path: Path, root: Path, exclude_spec, output_path: Optional[Path]) -> WalkEntry:
    if is_path_excluded(file_path.relative_to(root), exclude_spec):
        return WalkEntry(file_path, WalkDecision.EXCLUDED)
    if output_path is not None and _same_path(file_path, output_path):
        return WalkEntry(file_path, WalkDecision.OUTPUT_FILE)
    style = comment_style_for(file_path)
    if style is None:
        return WalkEntry(file_path, WalkDecision.NOT_CODE)
    return WalkEntry(file_path, WalkDecision.PACK, comment_style=style)
