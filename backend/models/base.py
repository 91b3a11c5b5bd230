"""
Base model configuration
Shared pydantic configuration for persisted records and handler responses
"""

from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseModel(PydanticBaseModel):
    """Base model whose serialized form uses field aliases.

        This base model configuration:
    - Accepts both the python field name and the persisted alias
    - Ignores unknown fields so newer records still load in older builds
    """

    model_config = ConfigDict(
        # Persisted JSON uses the historical names ("starttime", "focus_time", ...)
        # while Python code uses descriptive field names.
        populate_by_name=True,
        extra="ignore",
    )

    def model_dump(self, **kwargs):
        """Override model_dump to always use aliases by default."""
        kwargs.setdefault("by_alias", True)
        return super().model_dump(**kwargs)

    def model_dump_json(self, **kwargs):
        """Override model_dump_json to always use aliases by default."""
        kwargs.setdefault("by_alias", True)
        return super().model_dump_json(**kwargs)


class OperationResponse(BaseModel):
    """Common base response for handlers that return operation status."""

    success: bool
    message: str = ""
    error: str = ""


class OperationDataResponse(OperationResponse):
    """Operation response that includes an optional data payload."""

    data: Any | None = None


class TimedOperationResponse(OperationDataResponse):
    """Operation response with timestamp."""

    timestamp: str = ""
