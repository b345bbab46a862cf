# codepack/core/discovery/pattern_matching.py
from pathlib import Path
from typing import Optional, List
import pathspec
import structlog

from codepack.exceptions import DiscoveryError

log = structlog.get_logger(__name__)

def compile_exclude_spec(glob_patterns: List[str]) -> Optional[pathspec.PathSpec]:
    # compiles user --exclude patterns (gitwildmatch syntax) into a pathspec object.
    if not glob_patterns:
        return None
    try:
        return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, glob_patterns)
    except Exception as e:
        raise DiscoveryError(f"error compiling exclude patterns {glob_patterns}: {e}")

def is_path_excluded(path_relative_to_root: Path, exclude_spec: Optional[pathspec.PathSpec]) -> bool:
    # checks a path relative to the packed directory against the user excludes.
    if exclude_spec is None:
        return False
    return exclude_spec.match_file(path_relative_to_root.as_posix())
