from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional, Union


class Message(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class UpstreamChatRequest(BaseModel):
    model: str
    messages: List[Message]
    temperature: float
    max_tokens: int
    stream: bool = False


class UpstreamMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: str


class UpstreamChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: UpstreamMessage
    # some providers send a boolean false here alongside an in-band error
    finish_reason: Optional[Union[str, bool]] = None


class UpstreamChatResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    choices: List[UpstreamChoice] = Field(min_length=1)


class ChatResponse(BaseModel):
    messages: List[Message]
    conversationId: str


class EnvStatus(BaseModel):
    apiKeyConfigured: bool
    baseUrl: str
    model: str


class ErrorExtensions(BaseModel):
    code: str
    timestamp: str


class ErrorDetail(BaseModel):
    message: str
    extensions: ErrorExtensions


class ErrorResponse(BaseModel):
    errors: List[ErrorDetail]
