from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, model_validator

Cell = Union[str, int, float, None]


class ChartPoint(BaseModel):
    name: str
    value: float
    value2: float | None = None


class TextBlock(BaseModel):
    kind: Literal["text"] = "text"
    id: str = Field(min_length=1)
    heading: str | None = None
    body: str = ""
    styled: bool = True


class TableBlock(BaseModel):
    kind: Literal["table"] = "table"
    id: str = Field(min_length=1)
    heading: str | None = None
    columns: list[str] = Field(default_factory=list)
    rows: list[list[Cell]] = Field(default_factory=list)


class ChartBlock(BaseModel):
    kind: Literal["chart"] = "chart"
    id: str = Field(min_length=1)
    heading: str | None = None
    capture_handle: str | None = None
    chart_type: Literal["bar", "line"] = "bar"
    data: list[ChartPoint] = Field(default_factory=list)
    image_base64: str | None = None

    @property
    def handle(self) -> str:
        return self.capture_handle or self.id


ContentBlock = Annotated[Union[TextBlock, TableBlock, ChartBlock], Field(discriminator="kind")]


class ExportRequest(BaseModel):
    title: str | None = None
    blocks: list[ContentBlock] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> ExportRequest:
        seen: set[str] = set()
        dupes: list[str] = []
        for block in self.blocks:
            if block.id in seen:
                dupes.append(block.id)
            seen.add(block.id)
        if dupes:
            raise ValueError("Duplicate block ids: " + ", ".join(sorted(set(dupes))))
        return self


class ChatResponseExportRequest(BaseModel):
    question: str = Field(min_length=1)
    answer: str = ""
    chart_data: list[ChartPoint] = Field(default_factory=list)
    chart_type: Literal["bar", "line"] = "bar"
    title: str | None = None


class ErrorResponse(BaseModel):
    error: str
    detail: Any | None = None
