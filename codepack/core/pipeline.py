# codepack/core/pipeline.py
import collections
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Counter, List, Optional, Tuple

from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.console import Console as RichConsole
import structlog

from codepack.config.settings import PackConfig, IgnoreErrorPolicy
from codepack.core.discovery.ignore_rules import IgnoreRuleSet, load_ignore_rules
from codepack.core.discovery.walker import WalkDecision, WalkEntry, walk_code_files
from codepack.core.output import open_output_file, resolve_output_path, write_file_section
from codepack.exceptions import DiscoveryError, IgnoreFileError

log = structlog.get_logger(__name__)

UNREADABLE = "unreadable"

SKIP_MESSAGES = {
    WalkDecision.IGNORED.value: "Skipping (ignored by gitignore)",
    WalkDecision.EXCLUDED.value: "Skipping (excluded by pattern)",
    WalkDecision.SYMLINK.value: "Skipping (symbolic link)",
    WalkDecision.OUTPUT_FILE.value: "Skipping (output file)",
    WalkDecision.NOT_CODE.value: "Skipping (not a code file)",
    UNREADABLE: "Skipping (unreadable file)",
}


@dataclass
class PackResult:
    output_path: Path
    ignore_rules: Optional[IgnoreRuleSet] = None
    ignore_load_error: Optional[IgnoreFileError] = None
    packed_files: List[Path] = field(default_factory=list)
    # skip counts keyed by reason (WalkDecision value or "unreadable").
    skipped: Counter[str] = field(default_factory=collections.Counter)


class CodePacker:
    # orchestrates the pack pipeline: load ignore rules, walk, write.
    def __init__(
        self,
        config: PackConfig,
        echo: Optional[Callable[[str], None]] = None,
        warn: Optional[Callable[[str], None]] = None,
    ):
        self.config: PackConfig = config
        self.echo = echo
        self.warn = warn
        self.log = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")

    def _say(self, message: str):
        if self.config.verbose and self.echo is not None:
            self.echo(message)

    def load_rules(self) -> Tuple[Optional[IgnoreRuleSet], Optional[IgnoreFileError]]:
        """
        Loads the ignore rules for the input directory, applying the error policy.

        Returns the rules to filter with (None means unfiltered) and the load
        error, if any. With `IgnoreErrorPolicy.ABORT` the error is re-raised.
        """
        if self.config.no_ignore:
            self.log.info("ignore_rules_disabled")
            return None, None
        try:
            rules = load_ignore_rules(
                self.config.base_dir,
                ignore_file_name=self.config.ignore_file_name,
                repo_marker_name=self.config.repo_marker_name,
                default_excludes=self.config.default_excludes,
            )
            return rules, None
        except IgnoreFileError as e:
            policy = self.config.ignore_error_policy
            self.log.warning("ignore_rules_load_failed", error=str(e), policy=policy.value)
            if self.warn is not None:
                self.warn(f"Warning: Error loading {self.config.ignore_file_name}: {e}")
            if policy == IgnoreErrorPolicy.ABORT:
                raise
            if policy == IgnoreErrorPolicy.PARTIAL:
                return e.partial, e
            return None, e

    def _label_for(self, file_path: Path) -> str:
        # header label: input directory name joined with the file's relative path.
        root_name = self.config.base_dir.name or str(self.config.base_dir)
        return os.path.join(root_name, str(file_path.relative_to(self.config.base_dir)))

    def _write_entry(self, handle, entry: WalkEntry, result: PackResult) -> bool:
        try:
            content = entry.path.read_bytes()
        except OSError as e:
            self.log.warning("file_read_error", path=str(entry.path), error=str(e))
            result.skipped[UNREADABLE] += 1
            self._say(f"{SKIP_MESSAGES[UNREADABLE]}: {entry.path}")
            return False

        self._say(f"Processing: {entry.path}")
        header = entry.comment_style.header_for(self._label_for(entry.path))
        write_file_section(handle, header, content)
        result.packed_files.append(entry.path)
        return True

    def pack(self) -> PackResult:
        """Runs the full pipeline and returns what was packed and skipped."""
        base_dir = self.config.base_dir
        if not base_dir.is_dir():
            raise DiscoveryError(f"input directory does not exist or is not a directory: {base_dir}")

        output_path = resolve_output_path(base_dir, self.config.output_file, Path.cwd())
        self._say(f"Input directory: {base_dir}")
        self._say(f"Output file: {output_path}")

        rules, load_error = self.load_rules()
        result = PackResult(output_path=output_path, ignore_rules=rules, ignore_load_error=load_error)

        progress_disabled = self.config.verbose or not sys.stderr.isatty()
        stderr_console = RichConsole(file=sys.stderr)

        with open_output_file(output_path, force=self.config.force) as handle, Progress(
            SpinnerColumn(), TextColumn("[bold blue]{task.description}"),
            transient=True, disable=progress_disabled, console=stderr_console
        ) as progress:
            pack_task = progress.add_task("packing files...", total=None)
            for entry in walk_code_files(base_dir, rules, self.config.exclude_patterns, output_path):
                if entry.decision is not WalkDecision.PACK:
                    result.skipped[entry.decision.value] += 1
                    self._say(f"{SKIP_MESSAGES[entry.decision.value]}: {entry.path}")
                    continue
                if self._write_entry(handle, entry, result):
                    progress.update(pack_task, description=f"packed {entry.path.name}")

        self.log.info(
            "pack_complete",
            output=str(output_path),
            packed=len(result.packed_files),
            skipped=sum(result.skipped.values()),
        )
        return result
