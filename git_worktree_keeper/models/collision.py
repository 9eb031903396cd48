"""Collision data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CollisionKind(Enum):
    """How a desired branch name conflicts with the existing namespace."""

    EXACT = "exact"
    FORWARD = "forward"  # An existing branch nests under the desired name
    BACKWARD = "backward"  # The desired name nests under an existing branch


class CollisionDecision(Enum):
    """Resolution chosen when a worktree's target directory already exists."""

    DELETE = "delete"
    RENAME = "rename"
    CANCEL = "cancel"


@dataclass
class DirectoryConflict:
    """Context handed to the decision callback for an existing directory."""

    path: str
    branch_name: str
    operation: str  # "create" or "attach"
    alternative_name: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.operation} {self.branch_name}: '{self.path}' already exists"
