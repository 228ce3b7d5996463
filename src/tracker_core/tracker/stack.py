"""
Invocation stacks.

An invocation stack holds the keys of the invocations that are currently
running, so that a tracker can find the parent of a new invocation with
`peek()`. The tracker pushes the key when an invocation starts and pops it
when the invocation settles.
"""

from abc import ABC, abstractmethod
from contextvars import ContextVar
from typing import List, Optional, Tuple

from ..exceptions import ConfigurationError
from ..schemas import InvocationKey
from ..utils.config import get_settings
from ..utils.helpers import generate_prefixed_id
from ..utils.logger import LoggerLike, with_context


class InvocationStack(ABC):
    """LIFO of invocation keys scoped to the current execution"""

    @abstractmethod
    def push(self, key: InvocationKey) -> None:
        """Push the key of an invocation that is starting"""

    @abstractmethod
    def peek(self) -> Optional[InvocationKey]:
        """Top key, or None when empty"""

    @abstractmethod
    def pop(self) -> Optional[InvocationKey]:
        """Remove and return the top key; None when empty"""

    @abstractmethod
    def close(self) -> None:
        """Release the stack; keys are discarded"""

    @property
    @abstractmethod
    def depth(self) -> int:
        """Number of keys visible from the current execution"""


class BasicInvocationStack(InvocationStack):
    """
    Plain in-memory stack.

    Only correct when every push/pop of a call chain happens on one linear
    path: concurrent tasks or threads sharing it will see each other's keys.
    """

    def __init__(self, logger: Optional[LoggerLike] = None) -> None:
        self._keys: List[InvocationKey] = []
        self.logger = with_context(logger, "tracker_core.stack", stack="memory")
        self.logger.debug("creating stack")

    def push(self, key: InvocationKey) -> None:
        self.logger.debug("pushing key '%s'", key.id)
        self._keys.append(key)

    def peek(self) -> Optional[InvocationKey]:
        return self._keys[-1] if self._keys else None

    def pop(self) -> Optional[InvocationKey]:
        if not self._keys:
            self.logger.debug("no key to pop")
            return None

        key = self._keys.pop()
        self.logger.debug("popped key '%s'", key.id)
        return key

    def close(self) -> None:
        self.logger.debug("closing")
        self._keys.clear()

    @property
    def depth(self) -> int:
        return len(self._keys)


class ContextInvocationStack(InvocationStack):
    """
    Stack kept in a `ContextVar`.

    Each push/pop replaces the immutable tuple stored in the variable, so a
    push made before an `await` is still visible after it, while tasks
    (`asyncio.create_task`, `asyncio.gather`) and threads work on their own
    copy of the context and never see keys pushed by their siblings.

    Closing is terminal: later pushes are ignored and peek/pop return None.
    """

    def __init__(self, logger: Optional[LoggerLike] = None) -> None:
        self.id = generate_prefixed_id("stack")
        self._keys: ContextVar[Tuple[InvocationKey, ...]] = ContextVar(
            f"tracker_core_invocation_stack_{self.id}", default=()
        )
        self._closed = False
        self.logger = with_context(
            logger, "tracker_core.stack", stack="context", stack_id=self.id
        )
        self.logger.debug("creating stack")

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, key: InvocationKey) -> None:
        if self._closed:
            self.logger.debug("stack is closed, key '%s' not pushed", key.id)
            return

        self.logger.debug("pushing key '%s'", key.id)
        self._keys.set(self._keys.get() + (key,))

    def peek(self) -> Optional[InvocationKey]:
        if self._closed:
            return None

        keys = self._keys.get()
        return keys[-1] if keys else None

    def pop(self) -> Optional[InvocationKey]:
        if self._closed:
            return None

        keys = self._keys.get()
        if not keys:
            self.logger.debug("no key to pop")
            return None

        self.logger.debug("popping key '%s'", keys[-1].id)
        self._keys.set(keys[:-1])
        return keys[-1]

    def close(self) -> None:
        if not self._closed:
            self.logger.debug("closing")
            self._closed = True
            self._keys.set(())

    @property
    def depth(self) -> int:
        return 0 if self._closed else len(self._keys.get())


def create_invocation_stack(
    kind: Optional[str] = None, logger: Optional[LoggerLike] = None
) -> InvocationStack:
    """
    Create an invocation stack.

    Args:
        kind: "context" (async and thread aware) or "memory"; defaults to the
            `TRACKER_STACK` setting
        logger: optional logger for stack trace lines
    """
    kind = kind or get_settings().tracker.stack
    if kind == "memory":
        return BasicInvocationStack(logger=logger)
    if kind == "context":
        return ContextInvocationStack(logger=logger)
    raise ConfigurationError(
        "stack", expected_type="'context' or 'memory'", actual_value=kind
    )
