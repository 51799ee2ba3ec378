"""
Reconciliation of local and remote film sets.

diff() is a pure function: films found locally but missing from the list are
added, films on the list but not found locally are removed. Nothing else is
ever touched, and the two sides of a Delta can't overlap.
"""

from dataclasses import dataclass
from typing import AbstractSet


@dataclass(frozen=True)
class Delta:
    """
    Changes needed to make the list match the local folder.

    Attributes:
        to_add: Film IDs to add to the list.
        to_remove: Film IDs to remove from the list.
    """
    to_add: frozenset[str] = frozenset()
    to_remove: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        """True when the list already matches: no update is needed."""
        return not self.to_add and not self.to_remove

    def summary(self) -> str:
        """One-line description of the changes, e.g. '2 to add, 1 to remove'."""
        if self.is_empty:
            return "nothing to do"
        return f"{len(self.to_add)} to add, {len(self.to_remove)} to remove"


def diff(local: AbstractSet[str], remote: AbstractSet[str]) -> Delta:
    """
    Compute the delta between local and remote film IDs.

    Args:
        local: Film IDs resolved from the local folder.
        remote: Film IDs currently on the list.

    Returns:
        Delta with to_add = local - remote and to_remove = remote - local.
    """
    return Delta(
        to_add=frozenset(local - remote),
        to_remove=frozenset(remote - local),
    )
