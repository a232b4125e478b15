"""
PathNamer - Derived artifact naming and derivative detection.

Derived artifacts are named ``<stem>_<width>x<height>px_<width>w.<ext>``.
This layout is shared with existing remote buckets and must not change.
"""

import os
import re
from typing import Tuple


def get_file_stem(path: str) -> str:
    """Return the file name of a path without its extension."""
    return os.path.splitext(os.path.basename(path))[0]


def derive_path(
    source_basename: str,
    width: int,
    height: int,
    output_dir: str,
    extension: str = 'jpg'
) -> str:
    """
    Build the output path for one (source, size) pair.

    Args:
        source_basename: Source file name or path (only the stem is used)
        width: Target width in pixels
        height: Target height in pixels
        output_dir: Directory the artifact is written to
        extension: Output extension, with or without leading dot

    Returns:
        Path of the derived artifact
    """
    stem = get_file_stem(source_basename)
    ext = extension.lstrip('.')
    return os.path.join(output_dir, f"{stem}_{width}x{height}px_{width}w.{ext}")


class DerivativePolicy:
    """
    Decides whether a path or object key is a previously generated derivative.

    NOTE: ``is_derivative`` is deliberately coarse. Any file whose name stem
    contains an underscore is treated as a derivative, so a source file that
    happens to have an underscore in its own name (e.g. ``IMG_0001.jpg``) is
    indistinguishable from a derivative and will be excluded from processing.
    This is a known, intentional simplification. Subclass and override
    ``is_derivative`` to change it.
    """

    # Stem suffix written by derive_path: _<w>x<h>px_<w>w
    MARKER_PATTERN = re.compile(r'_(\d+)x(\d+)px_(\d+)w$')

    # Size tokens used by older remote layouts
    LEGACY_TOKENS: Tuple[str, ...] = ('_200', '_400', '_800', '_1920', '_thumb')

    def is_derivative(self, path: str) -> bool:
        """True if the file name stem contains an underscore."""
        return '_' in get_file_stem(path)

    def is_marked_derivative(self, path: str) -> bool:
        """True if the name carries the derive_path marker or a legacy size token."""
        name = os.path.basename(path)
        if self.MARKER_PATTERN.search(get_file_stem(name)):
            return True
        return any(token in name for token in self.LEGACY_TOKENS)

    def __call__(self, path: str) -> bool:
        """Allow use as a plain predicate."""
        return self.is_derivative(path)


DEFAULT_POLICY = DerivativePolicy()


def is_derivative(path: str) -> bool:
    """Module-level shortcut for the default policy."""
    return DEFAULT_POLICY.is_derivative(path)
