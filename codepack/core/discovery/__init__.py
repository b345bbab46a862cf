# codepack/core/discovery/__init__.py
"""
Directory traversal and filtering for codepack.

This package decides which files under the input directory end up in the
packed output: .gitignore-style rules discovered up to the repository root,
built-in exclusions, user exclude patterns and the comment-style table.
"""
from .ignore_rules import IgnoreRuleSet, load_ignore_rules, DEFAULT_EXCLUDED_NAMES
from .walker import walk_code_files, WalkDecision, WalkEntry

__all__ = [
    "IgnoreRuleSet",
    "load_ignore_rules",
    "DEFAULT_EXCLUDED_NAMES",
    "walk_code_files",
    "WalkDecision",
    "WalkEntry",
]
