"""Pattern matching against a single candidate directory.

A pattern is a plain string whose first character selects how it is tested:

    =name   the directory itself is called ``name``
    ^name   some ancestor of the directory is called ``name``
    >name   the immediate parent of the directory is called ``name``
    !inner  the result of ``inner`` inverted
    other   the directory contains an entry called exactly ``other``

Every string is a valid pattern; anything without a known sigil is an entry
pattern.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

EXACT = "="
ANCESTOR = "^"
PARENT = ">"
NEGATE = "!"


def get_parent(path: Path) -> Path:
    """Return the parent of path. The filesystem root is its own parent."""
    return path.parent


def basename(path: Path) -> str:
    """Return the final component of path ("" for the filesystem root)."""
    return path.name


def is_root(path: Path) -> bool:
    return get_parent(path) == path


@dataclass
class ListingCache:
    """Entry names of the most recently scanned directory.

    Holds a single directory at a time. ``scans`` counts real directory
    reads.
    """

    last_scanned_dir: Optional[Path] = None
    entries: List[str] = field(default_factory=list)
    scans: int = 0

    def entries_for(self, directory: Path) -> List[str]:
        """Return directory's entry names, rescanning if another directory is cached."""
        if self.last_scanned_dir != directory:
            self._scan(directory)
        return self.entries

    def _scan(self, directory: Path) -> None:
        self.last_scanned_dir = directory
        self.entries = []
        self.scans += 1
        try:
            with os.scandir(directory) as it:
                self.entries = [entry.name for entry in it]
        except OSError as e:
            # Unreadable or missing directories simply have no entries
            logger.debug("Could not list %s: %s", directory, e)


def matches_exact(directory: Path, name: str) -> bool:
    return basename(directory) == name


def matches_parent(directory: Path, name: str) -> bool:
    if is_root(directory):
        return False
    return basename(get_parent(directory)) == name


def matches_ancestor(directory: Path, name: str) -> bool:
    """Check whether any strict ancestor of directory is called name."""
    path = get_parent(directory)
    while True:
        if basename(path) == name:
            return True
        current = path
        path = get_parent(path)
        if current == path:
            return False


def matches_entry(directory: Path, name: str, cache: ListingCache) -> bool:
    return name in cache.entries_for(directory)


def evaluate(pattern: str, candidate_dir: Path, cache: ListingCache) -> bool:
    """Evaluate a single pattern against candidate_dir.

    Args:
        pattern: Pattern string using the sigil grammar.
        candidate_dir: Absolute directory under test.
        cache: Listing cache, repopulated when an entry pattern needs a
            directory other than the cached one.

    Returns:
        True if the pattern matches the directory.
    """
    sigil, rest = pattern[:1], pattern[1:]
    if sigil == NEGATE:
        return not evaluate(rest, candidate_dir, cache)
    if sigil == EXACT:
        return matches_exact(candidate_dir, rest)
    if sigil == ANCESTOR:
        return matches_ancestor(candidate_dir, rest)
    if sigil == PARENT:
        return matches_parent(candidate_dir, rest)
    return matches_entry(candidate_dir, pattern, cache)


def is_negated(pattern: str) -> bool:
    return pattern.startswith(NEGATE)


def describe(pattern: str) -> str:
    """Return a short human readable description of pattern."""
    sigil, rest = pattern[:1], pattern[1:]
    if sigil == NEGATE:
        return f"not ({describe(rest)})"
    if sigil == EXACT:
        return f"directory is named {rest!r}"
    if sigil == ANCESTOR:
        return f"inside a directory named {rest!r}"
    if sigil == PARENT:
        return f"parent is named {rest!r}"
    return f"contains {pattern!r}"
