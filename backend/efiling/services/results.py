"""Operation outcomes and the error hierarchy behind them.

Hierarchy:
    EfilingError
    ├── NotFoundError        - id does not resolve
    ├── ConflictError        - state precondition violated
    ├── ForbiddenError       - actor role not allowed
    ├── UnauthenticatedError - missing or bad credentials
    └── ValidationFailed     - malformed input

Engine operations raise these internally and convert them to an
OperationResult at their boundary, so callers only ever see results.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class ResultStatus(str, enum.Enum):
    SUCCESS = "success"
    ALREADY_SATISFIED = "already_satisfied"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    VALIDATION_ERROR = "validation_error"
    PARTIAL_FAILURE = "partial_failure"


class EfilingError(Exception):
    status = ResultStatus.PARTIAL_FAILURE
    http_status = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(EfilingError):
    status = ResultStatus.NOT_FOUND
    http_status = 404


class ConflictError(EfilingError):
    status = ResultStatus.CONFLICT
    http_status = 409


class ForbiddenError(EfilingError):
    status = ResultStatus.FORBIDDEN
    http_status = 403


class UnauthenticatedError(EfilingError):
    status = ResultStatus.FORBIDDEN
    http_status = 401


class ValidationFailed(EfilingError):
    status = ResultStatus.VALIDATION_ERROR
    http_status = 422


@dataclass
class OperationResult:
    status: ResultStatus
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status in (ResultStatus.SUCCESS, ResultStatus.ALREADY_SATISFIED)

    @classmethod
    def success(cls, message: str, **data) -> "OperationResult":
        return cls(ResultStatus.SUCCESS, message, data)

    @classmethod
    def already_satisfied(cls, message: str, **data) -> "OperationResult":
        return cls(ResultStatus.ALREADY_SATISFIED, message, data)


async def run_guarded(
    name: str,
    body: Callable[[], Awaitable[OperationResult]],
    commit: Callable[[], Awaitable[None]],
    rollback: Callable[[], Awaitable[None]],
) -> OperationResult:
    """Run one operation as a unit: commit on success, roll back on any failure.

    Expected failures (EfilingError) become their matching result. Anything
    else is a store failure: the transaction is rolled back and reported as
    PARTIAL_FAILURE, with a note when the rollback itself failed.
    """
    try:
        result = await body()
        await commit()
        return result
    except EfilingError as e:
        await rollback()
        logger.warning(f"{name} rejected: {e.message}")
        return OperationResult(e.status, e.message)
    except Exception as e:
        logger.exception(f"{name} failed, rolling back")
        try:
            await rollback()
        except Exception:
            logger.exception(f"{name} rollback failed")
            return OperationResult(
                ResultStatus.PARTIAL_FAILURE,
                f"{name} failed and could not be rolled back ({_describe(e)}); run reconcile",
            )
        return OperationResult(
            ResultStatus.PARTIAL_FAILURE,
            f"{name} failed, no changes were kept ({_describe(e)})",
        )


def _describe(e: Exception) -> str:
    msg = str(e).strip()
    return msg or type(e).__name__

