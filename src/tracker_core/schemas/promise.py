"""
Settlement records emitted by promise trackers.
"""

from typing import Any, Optional

from pydantic import Field

from .base import BaseSchema


class PromiseSettledEvent(BaseSchema):
    """Outcome of one tracked awaitable"""

    label: Optional[str] = Field(default=None, description="Label given at track time")
    duration: float = Field(..., ge=0, description="Elapsed time in milliseconds")
    rejected: bool = Field(default=False, description="Whether the awaitable failed")
    result: Any = Field(
        default=None, description="Resolved value, or the exception when rejected"
    )
