from typing import Literal

from pydantic import BaseModel, Field


class Message(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ModelResponse(BaseModel):
    content: str = Field("", description="Generated text.")
    token_usage: int = Field(0, description="Total tokens billed for the call.")
