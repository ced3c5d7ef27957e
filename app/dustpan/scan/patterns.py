"""Built-in target names and ignore patterns.

Target names are directory basenames that hold regenerable build output
or dependency caches. Ignore patterns are glob-style and prune whole
subtrees from the scan.
"""

import fnmatch
from collections.abc import Iterable

# Directories searched for when no --target option is given.
DEFAULT_TARGET_NAMES: tuple[str, ...] = (
    "node_modules",
    "target",
)

# Hidden directories (VCS metadata, tool caches, editor state) are pruned
# unless --ignore or --no-ignore says otherwise.
DEFAULT_IGNORE_GLOBS: tuple[str, ...] = (".*",)


def matches_ignore_glob(name: str, relative_path: str | None, patterns: Iterable[str]) -> bool:
    """Check if a directory is matched by any ignore pattern.

    Matching is case-sensitive and glob-style (fnmatch). Each pattern is
    tried against the directory basename and, when given, against its
    POSIX path relative to the scan root, so both ``.*`` and
    ``vendor/*`` style patterns work.

    Args:
        name: Directory basename.
        relative_path: POSIX path relative to the scan root, or None.
        patterns: Ignore glob patterns.

    Returns:
        True if any pattern matches, False otherwise.
    """
    for pattern in patterns:
        if fnmatch.fnmatchcase(name, pattern):
            return True
        if relative_path is not None and fnmatch.fnmatchcase(relative_path, pattern):
            return True
    return False
