"""GraphQL surface: `ping`, `envCheck` and the `chatWithAI` mutation."""
from typing import List, Optional

import strawberry
import structlog
from fastapi import Request
from strawberry.types import Info

from .llm_service import ChatProxy
from . import schemas

logger = structlog.get_logger()


@strawberry.type
class Message:
    role: str
    content: str


@strawberry.type
class ChatResponse:
    messages: List[Message]
    conversation_id: Optional[str]

    @classmethod
    def from_model(cls, model: schemas.ChatResponse) -> "ChatResponse":
        return cls(
            messages=[Message(role=m.role, content=m.content) for m in model.messages],
            conversation_id=model.conversationId,
        )


@strawberry.type
class EnvStatus:
    api_key_configured: bool
    base_url: str
    model: str


def _proxy(info: Info) -> ChatProxy:
    return info.context["proxy"]


@strawberry.type
class Query:
    @strawberry.field
    def ping(self, info: Info) -> str:
        return _proxy(info).ping()

    @strawberry.field
    def env_check(self, info: Info) -> EnvStatus:
        status = _proxy(info).env_check()
        return EnvStatus(
            api_key_configured=status.apiKeyConfigured,
            base_url=status.baseUrl,
            model=status.model,
        )


@strawberry.type
class Mutation:
    @strawberry.mutation(name="chatWithAI")
    async def chat_with_ai(
        self,
        info: Info,
        message: str,
        conversation_id: Optional[str] = None,
        system_prompt: Optional[str] = strawberry.UNSET,
    ) -> Optional[ChatResponse]:
        # omitted -> configured default; explicit null -> no system entry
        if system_prompt is strawberry.UNSET:
            system_prompt = None
        elif system_prompt is None:
            system_prompt = ""
        # Domain errors propagate; their `extensions` end up in the GraphQL error.
        result = await _proxy(info).chat_with_ai(
            message,
            conversation_id=conversation_id,
            system_prompt=system_prompt,
        )
        return ChatResponse.from_model(result)


class ProxySchema(strawberry.Schema):
    def process_errors(self, errors, execution_context=None) -> None:
        for error in errors:
            extensions = error.extensions or {}
            logger.error(
                "graphql.error",
                message=error.message,
                code=extensions.get("code"),
                path=error.path,
            )


schema = ProxySchema(query=Query, mutation=Mutation)


async def get_context(request: Request) -> dict:
    return {"proxy": request.app.state.proxy}
