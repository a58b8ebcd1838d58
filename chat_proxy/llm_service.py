from typing import List, Optional

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from .config import ProxyConfig
from .errors import (
    ErrorKind,
    InsufficientBalance,
    MissingConfiguration,
    UnexpectedUpstreamFormat,
    UpstreamError,
    UpstreamHTTPError,
    ValidationError,
)
from .schemas import ChatResponse, EnvStatus, Message, UpstreamChatRequest, UpstreamChatResponse
from .utils import ErrorClassifier, classify_provider_error, new_conversation_id, preview

logger = structlog.get_logger()


# ---------------------------------------------------
# Helpers
# ---------------------------------------------------
def build_messages(message: str, system_prompt: Optional[str]) -> List[Message]:
    """System prompt first when present, then the user message."""
    msgs: List[Message] = []
    if system_prompt:
        msgs.append(Message(role="system", content=system_prompt))
    msgs.append(Message(role="user", content=message))
    return msgs


def _structure_summary(data) -> dict:
    if not isinstance(data, dict):
        return {"type": type(data).__name__}
    choices = data.get("choices")
    first = choices[0] if isinstance(choices, list) and choices else None
    return {
        "id": data.get("id"),
        "object": data.get("object"),
        "model": data.get("model"),
        "has_choices": bool(choices),
        "choices_length": len(choices) if isinstance(choices, list) else 0,
        "first_choice_keys": sorted(first.keys()) if isinstance(first, dict) else None,
    }


# ---------------------------------------------------
# Proxy
# ---------------------------------------------------
class ChatProxy:
    """Adapter between the chatWithAI mutation and an OpenAI-compatible
    chat-completion endpoint."""

    def __init__(
        self,
        config: ProxyConfig,
        client: httpx.AsyncClient,
        classifier: ErrorClassifier = classify_provider_error,
    ):
        self.config = config
        self.client = client
        self.classifier = classifier

    def ping(self) -> str:
        return "pong"

    def env_check(self) -> EnvStatus:
        return EnvStatus(
            apiKeyConfigured=bool(self.config.api_key),
            baseUrl=self.config.base_url,
            model=self.config.model,
        )

    async def chat_with_ai(
        self,
        message: str,
        conversation_id: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> ChatResponse:
        if not message or not message.strip():
            raise ValidationError("'message' must be a non-empty string")

        if system_prompt is None:
            system_prompt = self.config.default_system_prompt

        logger.info(
            "upstream.request",
            base_url=self.config.base_url,
            model=self.config.model,
            has_key=bool(self.config.api_key),
            message_length=len(message),
            has_system_prompt=bool(system_prompt),
        )

        if not self.config.api_key:
            logger.error("upstream.missing_api_key")
            raise MissingConfiguration("API key is not configured (DEEPSEEK_API_KEY)")

        payload = UpstreamChatRequest(
            model=self.config.model,
            messages=build_messages(message, system_prompt),
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            stream=False,
        )
        logger.debug(
            "upstream.payload",
            model=payload.model,
            messages=[{"role": m.role, "content": preview(m.content)} for m in payload.messages],
        )

        reply = await self._complete(payload)

        return ChatResponse(
            messages=[
                Message(role="user", content=message),
                Message(role="assistant", content=reply),
            ],
            conversationId=conversation_id or new_conversation_id(),
        )

    async def _complete(self, payload: UpstreamChatRequest) -> str:
        try:
            resp = await self.client.post(
                self.config.completions_url,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload.model_dump(),
            )
        except httpx.TimeoutException as e:
            logger.error("upstream.timeout", error=str(e))
            raise UpstreamError(f"Upstream request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error("upstream.transport_error", error=str(e))
            raise UpstreamError(f"Upstream request failed: {e}") from e

        logger.info("upstream.response", status_code=resp.status_code)

        if not resp.is_success:
            body = resp.text
            logger.error("upstream.http_error", status_code=resp.status_code, body=body)
            if self.classifier(resp.status_code, body) == ErrorKind.INSUFFICIENT_BALANCE:
                raise InsufficientBalance(resp.status_code, body)
            raise UpstreamHTTPError(resp.status_code, body)

        try:
            data = resp.json()
        except ValueError as e:
            logger.error("upstream.invalid_json", body=resp.text)
            raise UnexpectedUpstreamFormat("Upstream returned a response that is not JSON") from e

        logger.debug("upstream.response_structure", **_structure_summary(data))

        try:
            parsed = UpstreamChatResponse.model_validate(data)
        except PydanticValidationError as e:
            logger.error("upstream.unexpected_format", data=data)
            raise UnexpectedUpstreamFormat("Upstream returned an unexpected response format") from e

        choice = parsed.choices[0]
        content = choice.message.content
        if (choice.finish_reason is None or choice.finish_reason is False) and (
            self.classifier(resp.status_code, content) == ErrorKind.INSUFFICIENT_BALANCE
        ):
            logger.error("upstream.in_band_balance_error")
            raise InsufficientBalance(resp.status_code, content)

        return content
