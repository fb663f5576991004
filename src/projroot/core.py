"""Core root resolution: walk upward until a pattern matches."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from projroot.patterns import ListingCache, evaluate, get_parent, is_negated

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class RootMatch:
    """A directory accepted as project root and the pattern that selected it."""

    directory: Path
    pattern: str

    def __str__(self) -> str:
        return f"{self.directory} (pattern {self.pattern})"


@dataclass
class WalkState:
    """State of one ancestor walk.

    Each walk owns its listing cache; walks never share state.
    """

    current: Path
    patterns: Tuple[str, ...]
    cache: ListingCache = field(default_factory=ListingCache)
    levels: int = 0

    def match_current(self) -> Optional[str]:
        """Return the first non-negated pattern matching the current directory."""
        for pattern in self.patterns:
            if is_negated(pattern):
                # Exclusion only suppresses this pattern, the rest still apply
                if not evaluate(pattern, self.current, self.cache):
                    logger.debug("%s excluded by %r", self.current, pattern)
                continue
            if evaluate(pattern, self.current, self.cache):
                return pattern
        return None

    def step(self) -> bool:
        """Move to the parent directory. Returns False at the filesystem root."""
        parent = get_parent(self.current)
        if parent == self.current:
            return False
        self.current = parent
        return True


def resolve(start_dir: PathLike, patterns: Iterable[str]) -> Optional[RootMatch]:
    """Find the nearest ancestor of start_dir matched by one of patterns.

    Directories are visited from start_dir toward the filesystem root. At each
    level patterns are tried in order, so a closer directory always wins and
    among patterns matching the same directory the earliest one wins.

    Args:
        start_dir: Directory to start from. Relative paths are made absolute.
        patterns: Ordered pattern strings.

    Returns:
        RootMatch for the first match, None if the filesystem root is reached
        without one.
    """
    state = WalkState(
        current=Path(os.path.abspath(start_dir)),
        patterns=tuple(patterns),
    )

    while True:
        state.levels += 1
        pattern = state.match_current()
        if pattern is not None:
            logger.debug("Matched %s with %r after %d levels", state.current, pattern, state.levels)
            return RootMatch(state.current, pattern)
        if not state.step():
            logger.debug("No root found from %s", start_dir)
            return None


def start_dir_for(path: PathLike) -> Path:
    """Return the directory a walk should start from for path.

    A file (or anything that is not an existing directory) maps to its
    containing directory, as an editor does for the current buffer.
    """
    path = Path(os.path.abspath(path))
    if path.is_dir():
        return path
    return path.parent
