"""Uniform result envelope returned by every public client operation."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")


class ApiResult(BaseModel, Generic[T]):
    """Outcome of an API operation. Never raised, always returned."""

    success: bool = Field(description="Whether the operation produced usable data")
    data: T | None = Field(default=None, description="Payload when successful")
    error: str | None = Field(default=None, description="Failure description")
    status_code: int | None = Field(default=None, description="HTTP status if one was seen")
    from_cache: bool = Field(
        default=False, description="True only when served from the offline cache"
    )

    @model_validator(mode="after")
    def validate_success_has_data(self) -> ApiResult[T]:
        """A successful result must carry data."""
        if self.success and self.data is None:
            msg = "successful ApiResult requires data"
            raise ValueError(msg)
        return self

    @classmethod
    def ok(cls, data: Any, status_code: int | None = None) -> ApiResult[Any]:
        """Build a live network success."""
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def cached(cls, data: Any) -> ApiResult[Any]:
        """Build a success served from the offline cache."""
        return cls(success=True, data=data, from_cache=True)

    @classmethod
    def fail(cls, error: str, status_code: int | None = None) -> ApiResult[Any]:
        """Build a failure."""
        return cls(success=False, error=error, status_code=status_code)
