# codepack/config/comment_styles.py
"""
Static table mapping source file extensions to the comment syntax used for
the per-file header line in the packed output.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class CommentStyle:
    prepend: str  # opening comment marker
    append: str = ""  # closing marker, for block-only languages

    def header_for(self, label: str) -> str:
        # the space before `append` is kept even when it is empty.
        return f"{self.prepend} {label} {self.append}\n"


_SLASHES = CommentStyle("//")
_HASH = CommentStyle("#")
_DASHES = CommentStyle("--")
_BANG = CommentStyle("!")
_PERCENT = CommentStyle("%")
_MARKUP = CommentStyle("<!--", "-->")
_ML = CommentStyle("(*", "*)")

FILE_EXT_TO_COMMENT: Dict[str, CommentStyle] = {
    # c and c-like languages
    ".c": _SLASHES, ".h": _SLASHES, ".cpp": _SLASHES, ".hpp": _SLASHES,
    ".cc": _SLASHES, ".hh": _SLASHES, ".cxx": _SLASHES, ".cs": _SLASHES,
    # web development
    ".js": _SLASHES, ".jsx": _SLASHES, ".ts": _SLASHES, ".tsx": _SLASHES,
    ".php": _SLASHES, ".css": CommentStyle("/*", "*/"), ".scss": _SLASHES,
    ".less": _SLASHES,
    # shells
    ".sh": _HASH, ".bash": _HASH, ".zsh": _HASH, ".fish": _HASH,
    ".ksh": _HASH, ".ps1": _HASH, ".psm1": _HASH,
    # modern languages
    ".go": _SLASHES, ".rs": _SLASHES, ".dart": _SLASHES, ".swift": _SLASHES,
    ".kt": _SLASHES, ".scala": _SLASHES,
    # traditional languages
    ".java": _SLASHES, ".groovy": _SLASHES, ".rb": _HASH, ".py": _HASH,
    ".pl": _HASH, ".pm": _HASH, ".lua": _DASHES, ".tcl": _HASH,
    # configuration and markup
    ".yaml": _HASH, ".yml": _HASH, ".toml": _HASH, ".ini": CommentStyle(";"),
    ".conf": _HASH, ".xml": _MARKUP, ".html": _MARKUP,
    # databases
    ".sql": _DASHES, ".psql": _DASHES, ".mysql": _DASHES,
    # other
    ".r": _HASH, ".jl": _HASH, ".fs": _SLASHES, ".fsx": _SLASHES,
    ".f90": _BANG, ".f95": _BANG, ".f": _BANG, ".elm": _DASHES,
    ".ex": _HASH, ".exs": _HASH, ".erl": _PERCENT, ".hrl": _PERCENT,
    ".hs": _DASHES, ".lhs": _DASHES, ".ml": _ML, ".mli": _ML,
    ".v": _SLASHES, ".vh": _SLASHES, ".vhd": _DASHES,
}


def file_extension(name: Union[str, Path]) -> str:
    """
    Returns the suffix starting at the final dot of the base name, dot included.

    Unlike `Path.suffix`, a dotfile such as `.bashrc` has the extension
    `.bashrc`. Returns "" when the base name contains no dot.
    """
    base = os.path.basename(str(name))
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def comment_style_for(path: Union[str, Path]) -> Optional[CommentStyle]:
    # lookup is case-sensitive: `.PY` is not a code file.
    return FILE_EXT_TO_COMMENT.get(file_extension(path))
