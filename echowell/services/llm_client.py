"""Thin Bedrock client wrapper for the companion's LLM calls."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Optional, Sequence

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from echowell.config.settings import settings
from echowell.services.aws import create_boto3_client
from echowell.services.response_contract import ContractT, ResponseContractError

logger = logging.getLogger(__name__)

MAX_JSON_RETRIES = 2


class LlmInvocationError(RuntimeError):
    """Raised when the Bedrock invocation fails."""


def _decode_bedrock_api_key(secret_value: Optional[str]) -> tuple[str, str] | None:
    """Decode the BEDROCK_API_KEY secret into access/secret key components."""

    if not secret_value:
        return None

    try:
        decoded_bytes = base64.b64decode(secret_value.strip(), validate=True)
    except (binascii.Error, ValueError):
        decoded_bytes = secret_value.encode("utf-8", "ignore")

    filtered = "".join(chr(b) for b in decoded_bytes if 31 < b < 127)
    if ":" not in filtered:
        return None
    access_key, secret_key = filtered.split(":", 1)
    return access_key, secret_key


class BedrockLlmClient:
    """Invoke Amazon Bedrock models with standard configuration."""

    def __init__(self, client: Any | None = None) -> None:
        self._model_id = settings.bedrock.model_id
        self._client = client if client is not None else self._build_client()

    @staticmethod
    def _build_client() -> Any | None:
        api_key_tuple = None
        if settings.bedrock.api_key:
            api_key_tuple = _decode_bedrock_api_key(
                settings.bedrock.api_key.get_secret_value()
            )

        try:
            return create_boto3_client(
                "bedrock-runtime",
                region_name=settings.bedrock.region,
                aws_access_key_id=api_key_tuple[0] if api_key_tuple else None,
                aws_secret_access_key=api_key_tuple[1] if api_key_tuple else None,
            )
        except Exception as exc:  # pragma: no cover - configuration issue
            logger.warning("Could not initialise Bedrock client: %s", exc)
            return None

    @property
    def available(self) -> bool:
        return self._client is not None and bool(self._model_id)

    async def invoke(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        history: Sequence[dict[str, str]] = (),
        max_tokens: int | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
        model_id: str | None = None,
    ) -> str | None:
        """Run a Bedrock ``converse`` call and return the aggregate text output.

        ``history`` holds prior ``{"role", "content"}`` turns; Bedrock requires the
        conversation to alternate and start with a user turn, so leading assistant
        turns are dropped and consecutive same-role turns are merged.
        """

        target_model_id = model_id or self._model_id
        if not self._client or not target_model_id:
            return None

        inference_cfg = {
            "maxTokens": max_tokens or settings.bedrock.max_tokens,
            "temperature": (
                temperature
                if temperature is not None
                else settings.bedrock.temperature
            ),
            "topP": top_p if top_p is not None else settings.bedrock.top_p,
        }
        messages = _to_converse_messages([*history, {"role": "user", "content": user_prompt}])

        def _call() -> str:
            response = self._client.converse(
                modelId=target_model_id,
                system=[{"text": system_prompt}],
                messages=messages,
                inferenceConfig=inference_cfg,
            )
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        try:
            result = await run_in_threadpool(_call)
        except Exception as exc:  # pragma: no cover - external dependency
            raise LlmInvocationError(str(exc)) from exc

        return result or None


def _to_converse_messages(turns: Sequence[dict[str, str]]) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []
    for turn in turns:
        role = "assistant" if turn.get("role") == "assistant" else "user"
        content = (turn.get("content") or "").strip()
        if not content:
            continue
        if not messages and role == "assistant":
            continue
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"][0]["text"] += "\n\n" + content
            continue
        messages.append({"role": role, "content": [{"text": content}]})
    return messages


_DEFAULT_CLIENT: BedrockLlmClient | None = None


def get_llm_client() -> BedrockLlmClient:
    """Return the lazily-created process-wide Bedrock client."""

    global _DEFAULT_CLIENT
    if _DEFAULT_CLIENT is None:
        _DEFAULT_CLIENT = BedrockLlmClient()
    return _DEFAULT_CLIENT


async def invoke_contract(
    contract: type[ContractT],
    *,
    system_prompt: str,
    user_prompt: str,
    client: BedrockLlmClient | None = None,
    max_retries: int = MAX_JSON_RETRIES,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> ContractT:
    """Invoke the model and validate its answer against ``contract``.

    Invalid JSON is retried ``max_retries`` times before giving up with
    ``ResponseContractError``. ``LlmInvocationError`` propagates untouched.
    """

    llm = client or get_llm_client()
    last_error: Exception | None = None
    for attempt in range(max_retries + 1):
        raw_response = await llm.invoke(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not raw_response:
            raise ResponseContractError("LLM returned an empty response.")

        try:
            return contract.from_json(raw_response)
        except (ResponseContractError, ValidationError) as exc:
            last_error = exc
            logger.warning(
                "LLM produced invalid %s JSON on attempt %s: %s",
                contract.__name__,
                attempt + 1,
                exc,
            )

    raise ResponseContractError(
        f"LLM returned invalid {contract.__name__} JSON after retrying."
    ) from last_error


__all__ = [
    "BedrockLlmClient",
    "LlmInvocationError",
    "MAX_JSON_RETRIES",
    "get_llm_client",
    "invoke_contract",
]
