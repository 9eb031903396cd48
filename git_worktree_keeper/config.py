"""Configuration handling for git-worktree-keeper"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONCURRENCY = 5


@dataclass
class Config:
    """Configuration for git-worktree-keeper with validation.

    Built once by the caller and handed to the services that need it.
    """

    # Worktree placement
    worktrees_base: Optional[str] = None  # None = parent of the repository root
    directory_prefix: str = ""
    branch_prefix: str = ""

    # Batch execution
    concurrency: int = DEFAULT_CONCURRENCY

    # Remote used to strip remote-tracking names
    remote_name: str = "origin"

    # Output
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_concurrency()
        self._validate_prefixes()
        self._validate_remote_name()

    def _validate_concurrency(self):
        """Validate concurrency is positive."""
        if self.concurrency <= 0:
            raise ValueError(f"concurrency must be positive, got {self.concurrency}")

    def _validate_prefixes(self):
        """Prefixes become path segments, so they cannot escape the base directory."""
        for name in ("directory_prefix", "branch_prefix"):
            value = getattr(self, name) or ""
            if ".." in value.split("/"):
                raise ValueError(f"{name} cannot contain '..', got '{value}'")
            setattr(self, name, value)
        if self.directory_prefix.startswith("/"):
            raise ValueError(f"directory_prefix must be relative, got '{self.directory_prefix}'")

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "worktrees_base": self.worktrees_base,
            "directory_prefix": self.directory_prefix,
            "branch_prefix": self.branch_prefix,
            "concurrency": self.concurrency,
            "remote_name": self.remote_name,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {
            "worktrees_base",
            "directory_prefix",
            "branch_prefix",
            "concurrency",
            "remote_name",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
