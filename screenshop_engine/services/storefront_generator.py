"""
Storefront generation service using Anthropic Claude.

Screenshots and page hints go in, a merged file set comes out:
prompt -> model call -> parse -> required-file check -> template merge.
"""
import time
from typing import List, Optional, Sequence

import httpx

from config import Settings, settings as default_settings
from exceptions import ClientInputError, ConfigurationError
from logging_config import logger
from models import GeneratedFile, PageHint, ScreenshotPayload
from services.model_client import AnthropicModelClient
from services.prompt_builder import REQUIRED_PATHS, build_prompt
from services.response_parser import parse_model_output, validate_required_files
from services.template_merger import TemplateLibrary, merge_with_templates


class StorefrontGenerator:
    """Runs one generation request end to end"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.settings = settings if settings is not None else default_settings
        self.templates = TemplateLibrary(self.settings.TEMPLATE_DIR)
        # Injected transport for the SDK; None uses its own client
        self._http_client = http_client
        self._model_client: Optional[AnthropicModelClient] = None

    @property
    def model_client(self) -> AnthropicModelClient:
        """Built on first use and reused for every later request"""
        if self._model_client is None:
            self._model_client = AnthropicModelClient(
                api_key=self.settings.ANTHROPIC_API_KEY,
                model=self.settings.CLAUDE_MODEL,
                max_tokens=self.settings.MAX_TOKENS,
                base_url=self.settings.ANTHROPIC_BASE_URL,
                timeout=self.settings.MODEL_REQUEST_TIMEOUT,
                http_client=self._http_client
            )
        return self._model_client

    async def aclose(self) -> None:
        if self._model_client is not None:
            await self._model_client.aclose()
            self._model_client = None

    async def generate(
        self,
        screenshots: Sequence[ScreenshotPayload],
        page_hints: Sequence[PageHint]
    ) -> List[GeneratedFile]:
        """
        Generate a complete storefront project.

        Args:
            screenshots: Normalized screenshots in upload order
            page_hints: One hint per screenshot, same order

        Returns:
            Merged file set; template files override model files

        Raises:
            ConfigurationError: Credential or templates missing
            ClientInputError: No screenshots, or hint count mismatch
            UpstreamError, ModelTransportError, MalformedResponse
        """
        if not self.settings.ANTHROPIC_API_KEY:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY is not configured. Add it to .env."
            )
        if not screenshots:
            raise ClientInputError("No screenshots provided.")

        start_time = time.time()
        logger.info(
            "Generating storefront",
            screenshots=len(screenshots),
            page_hints=[PageHint(h).value for h in page_hints]
        )

        prompt = build_prompt(screenshots, page_hints)
        text = await self.model_client.complete(prompt.system_prompt, prompt.messages)

        model_files = parse_model_output(text)
        if self.settings.ENFORCE_REQUIRED_FILES:
            validate_required_files(model_files, REQUIRED_PATHS)

        template_files = self.templates.build_template_files(
            shopify_domain=self.settings.SHOPIFY_STORE_DOMAIN,
            shopify_token=self.settings.SHOPIFY_STOREFRONT_ACCESS_TOKEN
        )
        files = merge_with_templates(model_files, template_files)

        logger.info(
            "Storefront generated",
            model_files=len(model_files),
            total_files=len(files),
            execution_time=time.time() - start_time
        )
        return files
