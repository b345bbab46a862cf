# codepack/core/output.py
import os
from pathlib import Path
from typing import BinaryIO, Optional
import structlog
from codepack.exceptions import OutputError

log = structlog.get_logger(__name__)

OUTPUT_SUFFIX = ".txt"

def resolve_output_path(input_dir: Path, output_file: Optional[Path], cwd: Path) -> Path:
    # the output goes to the working directory, named after the input directory by default.
    # the result is absolute and lexically normalised so it compares equal to walked paths.
    if output_file is None or str(output_file) == "":
        candidate = cwd / f"{input_dir.name}{OUTPUT_SUFFIX}"
    else:
        candidate = cwd / Path(output_file).expanduser()
    return Path(os.path.abspath(candidate))

def open_output_file(output_file_path: Path, force: bool = False) -> BinaryIO:
    # creates (or truncates, with force) the output file for binary writing.
    if not force and output_file_path.exists():
        raise OutputError("Output file already exists. Use --force to overwrite.")
    log.info("opening_output_file", path=str(output_file_path), force=force)
    try:
        return output_file_path.open("wb")
    except OSError as e:
        raise OutputError(f"error creating output file '{output_file_path}': {e}")

def write_file_section(handle: BinaryIO, header: str, content: bytes):
    # writes one packed file: header line, raw content, blank separator.
    try:
        handle.write(header.encode("utf-8", errors="surrogateescape"))
        handle.write(content)
        handle.write(b"\n\n")
    except OSError as e:
        raise OutputError(f"error writing to output file: {e}")
