from abc import ABC, abstractmethod
from typing import Generic, TypeVar

ModelT = TypeVar("ModelT")
IdT = TypeVar("IdT")


class Repository(ABC, Generic[ModelT, IdT]):
    """Minimal get/update-by-id record store."""

    @abstractmethod
    async def get(self, id: IdT) -> ModelT | None:
        ...

    @abstractmethod
    async def update(self, id: IdT, updates: dict) -> ModelT | None:
        ...
