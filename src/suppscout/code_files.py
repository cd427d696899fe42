"""
Extension-based detection of source-code files inside supplementary bundles.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Sequence

from .models import SupplementaryBundle, SupplementaryFile


DEFAULT_CODE_EXTENSIONS: Sequence[str] = (
    ".py",     # Python
    ".r",      # R
    ".rmd",    # R Markdown
    ".m",      # MATLAB / Octave
    ".jl",     # Julia
    ".js",     # JavaScript
    ".ts",     # TypeScript
    ".java",
    ".c",
    ".cpp",    # C++
    ".cs",     # C#
    ".go",
    ".rb",     # Ruby
    ".sh",     # shell
    ".pl",     # Perl
    ".scala",
    ".kt",     # Kotlin
    ".rs",     # Rust
    ".swift",
    ".f90",    # Fortran 90
    ".f95",    # Fortran 95
    ".lua",
    ".sql",
    ".ipynb",  # Jupyter notebooks
)


def _normalise(extensions: Iterable[str]) -> FrozenSet[str]:
    return frozenset(ext.lower() for ext in extensions)


class CodeFileIdentifier:
    """
    Decide which bundle files are source code, judged by file extension.

    Extensions include the leading dot and are compared case-insensitively.
    """

    def __init__(self, extensions: Iterable[str] = DEFAULT_CODE_EXTENSIONS) -> None:
        self._extensions = _normalise(extensions)

    @property
    def extensions(self) -> FrozenSet[str]:
        return self._extensions

    def set_extensions(self, extensions: Iterable[str]) -> None:
        self._extensions = _normalise(extensions)

    def is_code_file(self, filename: str) -> bool:
        dot = filename.rfind(".")
        # no dot, a dotfile such as ".gitignore", or a trailing dot
        if dot <= 0 or dot == len(filename) - 1:
            return False
        return filename[dot:].lower() in self._extensions

    def identify_code_files(self, bundle: SupplementaryBundle) -> List[SupplementaryFile]:
        return [item for item in bundle.files if self.is_code_file(item.name)]
