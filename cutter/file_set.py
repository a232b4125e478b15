"""
FileSetResolver - Enumerates source images in a directory.
"""

import logging
import os
from typing import List, Optional

from .path_namer import DerivativePolicy, DEFAULT_POLICY


class FileSetResolver:
    """
    Lists candidate source files in a directory, skipping derivatives.

    Only direct entries of the root are considered (no recursion).
    """

    def __init__(
        self,
        policy: Optional[DerivativePolicy] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.policy = policy or DEFAULT_POLICY
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, root: str) -> List[str]:
        """
        Resolve the source files under root.

        Args:
            root: Directory to enumerate

        Returns:
            Source file paths in directory iteration order

        Raises:
            OSError: If root does not exist, is not a directory or is unreadable
        """
        sources = []
        skipped = 0

        with os.scandir(root) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                if self.policy.is_derivative(entry.path):
                    skipped += 1
                    continue
                sources.append(entry.path)

        self.logger.info(
            f"Found {len(sources)} source files in {root} "
            f"(skipped {skipped} derivatives)"
        )
        return sources
