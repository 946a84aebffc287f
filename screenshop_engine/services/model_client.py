"""
Anthropic Messages API client used for storefront generation
"""
from typing import Any, Dict, List, Optional

import anthropic
import httpx
from anthropic import AsyncAnthropic

from exceptions import (
    ConfigurationError,
    MalformedResponse,
    ModelTransportError,
    ParseFailure,
    UpstreamError,
)
from logging_config import logger


class AnthropicModelClient:
    """One non-streamed completion per call, no retries"""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        if not api_key:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY is not configured. Add it to .env."
            )

        client_kwargs: Dict[str, Any] = {"api_key": api_key, "max_retries": 0}
        if base_url:
            client_kwargs["base_url"] = base_url
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if http_client is not None:
            client_kwargs["http_client"] = http_client

        self.client = AsyncAnthropic(**client_kwargs)
        self.model = model
        self.max_tokens = max_tokens

    async def complete(self, system_prompt: str, messages: List[Dict[str, Any]]) -> str:
        """
        Send the prompt and wait for the full completion.

        Returns:
            Text of the first text-typed content block

        Raises:
            UpstreamError: The endpoint returned a non-success status
            ModelTransportError: The endpoint could not be reached
            MalformedResponse: The completion held no text block
        """
        logger.info(
            "Calling Anthropic API",
            model=self.model,
            max_tokens=self.max_tokens,
            prompt_chars=len(system_prompt)
        )

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=messages
            )
        except anthropic.APIStatusError as e:
            detail = e.response.text
            logger.error(
                "Anthropic API returned an error",
                status_code=e.status_code,
                detail=detail[:500]
            )
            raise UpstreamError(e.status_code, detail) from e
        except anthropic.APIConnectionError as e:
            logger.error(f"Could not reach Anthropic API: {str(e)}")
            raise ModelTransportError(f"Could not reach Anthropic API: {e}") from e

        logger.info(
            "Anthropic API call complete",
            stop_reason=response.stop_reason,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens
        )

        for block in response.content:
            if block.type == "text":
                return block.text

        raise MalformedResponse(
            ParseFailure.NO_TEXT_BLOCK,
            "Anthropic response contained no text content"
        )

    async def aclose(self) -> None:
        """Close the SDK's HTTP connection pool"""
        await self.client.close()
