"""Per-invocation configuration — env vars and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

HNSDIAG_ARGS = ("list", "endpoints", "-df")


@dataclass
class ProxyctlConfig:
    """Settings for one proxyctl invocation."""

    hnsdiag_path: str = "hnsdiag"
    hnsdiag_args: tuple[str, ...] = field(default=HNSDIAG_ARGS)

    @property
    def hnsdiag_command(self) -> list[str]:
        return [self.hnsdiag_path, *self.hnsdiag_args]

    @classmethod
    def load(cls) -> ProxyctlConfig:
        """Load config from environment variables with built-in defaults."""
        config = cls()

        env_hnsdiag = os.environ.get("PROXYCTL_HNSDIAG")
        if env_hnsdiag:
            config.hnsdiag_path = env_hnsdiag

        return config
