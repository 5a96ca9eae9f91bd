"""The transaction boundary an import run or a manual edit executes in."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from types import TracebackType

    from sitetrack.domain.ports.persistence import TrackedEntityRepository


class ImportRepositories(Protocol):
    @property
    def entities(self) -> TrackedEntityRepository: ...


class ImportUnitOfWork(Protocol):
    """Context manager owning one store transaction.

    Leaving the block without ``commit()`` discards every write, which is how
    dry runs guarantee the store is untouched.
    """

    @property
    def repositories(self) -> ImportRepositories: ...

    def __enter__(self) -> ImportUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
