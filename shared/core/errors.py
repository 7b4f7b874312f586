from typing import Any, Dict, List


class BulkOperationError(Exception):
    """
    Raised after every item of a bulk update has been attempted and at least
    one failed. Successful items stay committed, callers re-fetch to see the
    resulting state.
    """

    def __init__(self, operation: str, succeeded: List[Any], failed: Dict[Any, str]):
        self.operation = operation
        self.succeeded = list(succeeded)
        self.failed = dict(failed)
        super().__init__(
            f"{operation}: {len(self.failed)} of "
            f"{len(self.succeeded) + len(self.failed)} items failed"
        )

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "succeeded": [str(i) for i in self.succeeded],
            "failed": [
                {"id": str(i), "reason": reason} for i, reason in self.failed.items()
            ],
        }


class SequenceConflictError(Exception):
    """A sequential number could not be allocated without colliding."""
