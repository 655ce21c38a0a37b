"""Section tree models."""

from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field


class CodeBlock(BaseModel):
    """A fenced code block with its optional language tag."""

    model_config = ConfigDict(frozen=True)

    language: str | None = None
    body: str


class Section(BaseModel):
    """A heading with the code blocks and sections scoped beneath it.

    The synthetic document root has level 0 and an empty title.
    """

    title: str
    level: int = Field(..., ge=0, le=6)
    description: str | None = None
    code_blocks: list[CodeBlock] = Field(default_factory=list)
    children: list["Section"] = Field(default_factory=list)

    def walk(self) -> Iterator["Section"]:
        """Yield this section and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.walk()
