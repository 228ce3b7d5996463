"""
Tracker Package for tracker-core

Invocation stacks, invocation trackers and promise trackers.
"""

from .invocation import TRACKED_ATTRIBUTE, InvocationTracker, create_invocation_tracker
from .methods import track_methods
from .promise import (
    BasePromiseTracker,
    PromiseHolder,
    PromiseLike,
    PromiseTracker,
    PromiseVault,
    hold_promises,
    track_promises,
    vault_promises,
)
from .reporting import log_invocations, log_settlements
from .stack import (
    BasicInvocationStack,
    ContextInvocationStack,
    InvocationStack,
    create_invocation_stack,
)

__all__ = [
    # Stacks
    "InvocationStack",
    "BasicInvocationStack",
    "ContextInvocationStack",
    "create_invocation_stack",
    # Invocations
    "TRACKED_ATTRIBUTE",
    "InvocationTracker",
    "create_invocation_tracker",
    "track_methods",
    # Promises
    "PromiseLike",
    "BasePromiseTracker",
    "PromiseTracker",
    "PromiseHolder",
    "PromiseVault",
    "track_promises",
    "hold_promises",
    "vault_promises",
    # Logging bridges
    "log_invocations",
    "log_settlements",
]
