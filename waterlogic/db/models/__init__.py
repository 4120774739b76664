# ./waterlogic/db/models/__init__.py

from .base import Base, UUIDMixin, TimestampMixin
from .proposal_run import ProposalRun

__all__ = ["Base", "UUIDMixin", "TimestampMixin", "ProposalRun"]
