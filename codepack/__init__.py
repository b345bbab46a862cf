"""codepack: concatenate a source tree into one annotated text file."""

__version__ = "0.1.0"
