from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone


class CamelModel(BaseModel):
    """Base for API schemas: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorInfo(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class PaginationMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ApiResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    pagination: Optional[PaginationMeta] = None
    error: Optional[ErrorInfo] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with JSON-serializable values."""
        payload = self.model_dump(mode="json", by_alias=True)
        if self.pagination is None:
            payload.pop("pagination")
        if self.success:
            payload.pop("error")
        else:
            payload.pop("data")
            payload.pop("message")
            if self.error is not None and self.error.details is None:
                payload["error"].pop("details")
        return payload

    @classmethod
    def ok(cls, data: Any = None, message: str = "Success") -> "ApiResponse":
        return cls(success=True, message=message, data=data)

    @classmethod
    def paginated(cls, page: "Any", message: str = "Success") -> "ApiResponse":
        """Wrap a ``Page`` whose items are already serialized."""
        return cls(success=True, message=message, data=page.items, pagination=page.meta())

    @classmethod
    def fail(cls, message: str, code: str = "ERROR", details: Optional[Any] = None) -> "ApiResponse":
        return cls(
            success=False,
            error=ErrorInfo(code=code, message=message, details=details)
        )


def serialize(schema: type, obj: Any) -> Any:
    """Dump an ORM object (or list of them) through a response schema."""
    if isinstance(obj, list):
        return [serialize(schema, item) for item in obj]
    return schema.model_validate(obj).model_dump(mode="json", by_alias=True)
