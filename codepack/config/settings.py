import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional
import structlog

log = structlog.get_logger(__name__)

DEFAULT_IGNORE_FILE_NAME = ".gitignore"
DEFAULT_REPO_MARKER_NAME = ".git"
DEFAULT_CONSOLE_SHOW_SUMMARY = False

class IgnoreErrorPolicy(Enum):
    # what to do when an existing ignore file cannot be read.
    UNFILTERED = "unfiltered"
    PARTIAL = "partial"
    ABORT = "abort"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["IgnoreErrorPolicy"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_ignore_error_policy_string", input_string=s)
            return None

DEFAULT_IGNORE_ERROR_POLICY = IgnoreErrorPolicy.UNFILTERED

@dataclass
class PackConfig:
    # holds all configuration parameters for a single run.
    input_dir: Path = field(default_factory=lambda: Path("."))
    output_file: Optional[Path] = None
    force: bool = False
    verbose: bool = False
    exclude_patterns: List[str] = field(default_factory=list)
    no_ignore: bool = False
    ignore_error_policy: IgnoreErrorPolicy = DEFAULT_IGNORE_ERROR_POLICY
    ignore_file_name: str = DEFAULT_IGNORE_FILE_NAME
    repo_marker_name: str = DEFAULT_REPO_MARKER_NAME
    # None keeps the built-in exclusion set.
    default_excludes: Optional[List[str]] = None
    console_show_summary: bool = DEFAULT_CONSOLE_SHOW_SUMMARY

    # internal state, not set directly by user flags.
    base_dir: Path = field(init=False)

    def __post_init__(self):
        # performs initial setup after dataclass instantiation.
        self.input_dir = Path(self.input_dir)
        self.base_dir = Path(os.path.abspath(self.input_dir.expanduser()))
