"""Branch name collision detection.

Branch names double as directory path segments, so a name may never be a
``/``-prefix of another one, even where git itself would allow it. Creating
``feature`` next to ``feature/x`` (or ``feature/x/y`` under ``feature/x``)
is always refused.
"""

from typing import Iterable, Optional

from git_worktree_keeper.exceptions import NameCollisionError
from git_worktree_keeper.models.collision import CollisionKind


class CollisionResolver:
    """Pure collision checks against a branch namespace."""

    @staticmethod
    def find_collision(name: str, namespace: Iterable[str]) -> Optional[tuple[CollisionKind, list[str]]]:
        """Find how ``name`` collides with ``namespace``.

        Returns:
            (kind, conflicting names) for the first matching case in the
            order exact, forward, backward; None when there is no collision
        """
        names = list(namespace)

        if name in names:
            return CollisionKind.EXACT, [name]

        forward = [existing for existing in names if existing.startswith(name + "/")]
        if forward:
            return CollisionKind.FORWARD, forward

        backward = [existing for existing in names if name.startswith(existing + "/")]
        if backward:
            return CollisionKind.BACKWARD, backward

        return None

    @classmethod
    def check_collision(cls, name: str, namespace: Iterable[str]) -> None:
        """Raise NameCollisionError if ``name`` cannot be added to ``namespace``."""
        collision = cls.find_collision(name, namespace)
        if collision is not None:
            kind, conflicts = collision
            raise NameCollisionError(name, kind, conflicts)

    @classmethod
    def suggest_alternative(cls, name: str, namespace: Iterable[str]) -> str:
        """First of ``name-1``, ``name-2``, ... that does not collide.

        When an existing branch is a ``/``-ancestor of ``name`` no suffix can
        help, so the name is flattened (``a/b`` -> ``a-b``) before suffixing.
        After that each existing name blocks at most one candidate, so at most
        ``len(namespace) + 1`` candidates are tried.
        """
        names = list(namespace)
        base = name
        if any(name.startswith(existing + "/") for existing in names):
            base = name.replace("/", "-")

        counter = 1
        while True:
            candidate = f"{base}-{counter}"
            if cls.find_collision(candidate, names) is None:
                return candidate
            counter += 1


check_collision = CollisionResolver.check_collision
suggest_alternative = CollisionResolver.suggest_alternative
