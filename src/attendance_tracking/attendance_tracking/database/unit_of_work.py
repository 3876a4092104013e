from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol


class UnitOfWork(Protocol):
    def transaction(self) -> ContextManager[None]:
        """Repository writes made inside commit together or not at all."""

        raise NotImplementedError


class AutoCommit:
    """No shared transaction: every repository call commits on its own."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        yield
