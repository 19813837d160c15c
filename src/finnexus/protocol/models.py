"""Inbound frame types.

Frames form a tagged union discriminated by the `type` field, so the
rest of the package dispatches on the frame class instead of probing
for fields.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class FrameType:
    """Wire values of the `type` field."""

    STEP = "step"
    TOKEN = "token"
    ERROR = "error"
    DONE = "done"

    ALL = frozenset({STEP, TOKEN, ERROR, DONE})


class StepFrame(BaseModel):
    """An intermediate reasoning trace emitted before output tokens."""

    model_config = ConfigDict(frozen=True)

    type: Literal["step"] = "step"
    content: str = Field(description="Opaque trace text")


class TokenFrame(BaseModel):
    """A fragment of the assistant response."""

    model_config = ConfigDict(frozen=True)

    type: Literal["token"] = "token"
    content: str = Field(description="Text fragment to append")


class ErrorFrame(BaseModel):
    """An application-level error reported by the agent."""

    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    content: str = Field(description="Error description")


class DoneFrame(BaseModel):
    """End of the current assistant turn."""

    model_config = ConfigDict(frozen=True)

    type: Literal["done"] = "done"


Frame = Annotated[
    Union[StepFrame, TokenFrame, ErrorFrame, DoneFrame],
    Field(discriminator="type"),
]
