"""Base classes shared by configuration and runtime state models.

Kept apart from config.py so that log.py can build its sink models on
them without importing the full configuration module.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Anything holding a resource released by close()."""

    def close(self) -> None:
        """Release resources."""
        ...


class BaseCloseable(BaseModel):
    """Model that closes every Closeable field when it is closed.

    Closing walks the declared fields and calls close() on each child
    that supports it, so Config.close() reaches the logger and the
    logger reaches its file sink. A failing child does not stop the
    remaining ones.
    """

    def close(self):
        """Close all closeable children, reporting failures to stderr."""
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None or not isinstance(child, Closeable):
                continue
            try:
                child.close()
            except Exception as e:
                print(
                    f"Warning: Error closing {field_name}: {e}",
                    file=sys.stderr,
                )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for models loaded from YAML/env/CLI/git config."""
    pass


class BaseState(BaseCloseable):
    """Marker base for models mutated while a workflow runs."""
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
