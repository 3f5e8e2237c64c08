"""Transaction boundary shared by the stores of one request."""

from abc import ABC, abstractmethod


class BaseUnitOfWork(ABC):
    """Commits or discards everything the stores staged."""

    @abstractmethod
    async def commit(self) -> None:
        """Make staged writes durable.

        Raises:
            StorageError: If the commit fails.
        """

    @abstractmethod
    async def rollback(self) -> None:
        """Discard staged writes."""
