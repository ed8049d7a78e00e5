from contextlib import AbstractAsyncContextManager
from typing import Iterable

from src.platform.state.keyed_lock import KeyedLock
from src.service.booking.app.interface.i_child_lock import IChildLock


class ChildLockImpl(IChildLock):
    """Per-child serialization for a single process"""

    def __init__(self, *, keyed_lock: KeyedLock | None = None) -> None:
        self.keyed_lock = keyed_lock or KeyedLock(namespace='child')

    def hold(self, child_keys: Iterable[str]) -> AbstractAsyncContextManager[None]:
        return self.keyed_lock.hold(child_keys)
