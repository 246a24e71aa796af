from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class FAQRecord(BaseModel):
    """A FAQ row resolved into a typed record."""

    model_config = ConfigDict(extra="allow")

    uid: int = Field(gt=0)
    pid: int = Field(ge=0)
    question: str = ""
    answer: str = ""
    sorting: int = 0


class CategoryRecord(BaseModel):
    """A sys_category row resolved into a typed record."""

    model_config = ConfigDict(extra="allow")

    uid: int = Field(gt=0)
    pid: int = Field(default=0, ge=0)
    parent: int = 0
    title: str
    description: Optional[str] = ""
    sorting: int = 0


class ProcessRequest(BaseModel):
    """Request body for running the FAQ processor directly."""

    configuration: Dict[str, Any] = Field(
        default_factory=dict, description="Processor configuration"
    )
    data: Dict[str, Any] = Field(
        default_factory=dict, description="Page context (content element row)"
    )
    processed_data: Dict[str, Any] = Field(
        default_factory=dict, description="Already processed data to augment"
    )
