from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Iterable


class IChildLock(ABC):
    """
    Serializes writes per child.

    Duplicate-package and availability checks read a snapshot and then
    write; holding this lock across both is what stops two concurrent
    requests from passing against the same stale snapshot.
    """

    @abstractmethod
    def hold(self, child_keys: Iterable[str]) -> AbstractAsyncContextManager[None]:
        """
        Args:
            child_keys: Participant.child_key of every child the write touches
        """
        pass
