"""
Error taxonomy.

We separate error types so callers can react correctly.
Example:
ValidationError must block before any file is written or container removed.
OrchestratorFailed aborts the run and carries the exit status of the tool.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class ValidationFailure(str, Enum):
    """Which cluster spec constraint was violated."""

    too_few_management_nodes = "too_few_management_nodes"
    non_positive_replication_factor = "non_positive_replication_factor"
    too_few_data_nodes = "too_few_data_nodes"
    data_count_not_divisible = "data_count_not_divisible"
    negative_node_count = "negative_node_count"
    node_id_collision = "node_id_collision"


class ComposeError(Exception):
    """Base class for all rondb_compose exceptions."""


class ValidationError(ComposeError):
    """Raised when a ClusterSpec cannot produce a valid topology."""

    def __init__(self, reason: ValidationFailure, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message

    def __str__(self) -> str:
        return self.message


class OrchestratorFailed(ComposeError):
    """Raised when docker or docker-compose exits non zero."""

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        self.command = list(command)
        self.returncode = returncode
        super().__init__(f"command failed with exit code {returncode}: {' '.join(self.command)}")
