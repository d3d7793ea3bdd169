"""
Pydantic models for the prompt gateway.

Three groups:
- the inbound Prompt posted by callers
- the chat-completion wire shapes exchanged with the upstream API
- the ResultEnvelope returned to callers
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


DEFAULT_TEMPERATURE = 0.2

Role = Literal["system", "user", "assistant"]


class Prompt(BaseModel):
    """Request body for POST /api/prompt."""
    context: str = ""  # becomes the system message
    message: str = ""  # becomes the user message

    @field_validator("context", "message", mode="before")
    @classmethod
    def null_is_empty(cls, v):
        return "" if v is None else v


class Message(BaseModel):
    """A single message in a conversation."""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    @field_validator("content", mode="before")
    @classmethod
    def null_content_is_empty(cls, v):
        return "" if v is None else v


class CompletionRequest(BaseModel):
    """Request body sent to the completion endpoint."""
    model: str
    messages: list[Message]
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: Optional[int] = None

    def to_wire(self) -> dict:
        """Dump for the wire, dropping max_tokens when it is unset or zero."""
        data = self.model_dump(exclude={"max_tokens"})
        if self.max_tokens:
            data["max_tokens"] = self.max_tokens
        return data


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def null_is_zero(cls, v):
        return 0 if v is None else v


class Choice(BaseModel):
    """One candidate completion."""
    index: int = 0
    message: Message
    finish_reason: str = ""

    @field_validator("finish_reason", mode="before")
    @classmethod
    def null_reason_is_empty(cls, v):
        return "" if v is None else v

    @field_validator("index", mode="before")
    @classmethod
    def null_index_is_zero(cls, v):
        return 0 if v is None else v


class CompletionResponse(BaseModel):
    """Response body returned by the completion endpoint."""
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[Choice] = []
    usage: Usage = Usage()

    @field_validator("id", "object", "created", "model", "choices", "usage", mode="before")
    @classmethod
    def null_is_default(cls, v, info: ValidationInfo):
        """Upstream nulls decode to the field's zero value."""
        if v is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return v


class EmptyChoicesError(ValueError):
    """The upstream response carried no choices to report."""


class ResultEnvelope(BaseModel):
    """Response body for a successful POST /api/prompt."""
    prompt_result: str
    finish_reason: str
    model: str
    used_tokens: int

    @classmethod
    def from_completion(cls, completion: CompletionResponse) -> "ResultEnvelope":
        """
        Shape an upstream response for the caller.

        The LAST choice wins, not the first. Callers of the original
        service depend on this ordering.

        Raises:
            EmptyChoicesError: if the response has no choices
        """
        if not completion.choices:
            raise EmptyChoicesError("upstream response contained no choices")

        last = completion.choices[-1]
        return cls(
            prompt_result=last.message.content,
            finish_reason=last.finish_reason,
            model=completion.model,
            used_tokens=completion.usage.total_tokens,
        )
