from typing import ClassVar

from lvtakeoff.config.exceptions import ConfigurationError
from lvtakeoff.config.settings import Settings
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.example_client_adapter import ExampleClientAdapter
from lvtakeoff.gateway.gemini_client_adapter import GeminiClientAdapter
from lvtakeoff.gateway.openai_client_adapter import OpenAIClientAdapter


class VisionClientFactory:
    """Creates the configured vision client, validating credentials first."""

    SUPPORTED_PROVIDERS: ClassVar[tuple[str, ...]] = (
        "example",
        "gemini",
        "openai",
        "openai_compatible",
    )
    PLACEHOLDER_API_KEYS: ClassVar[frozenset[str]] = frozenset({
        "your-gemini-api-key-here",
        "your-openai-api-key-here",
        "your-api-key-here",
        "changeme",
    })

    @classmethod
    def create(cls, settings: Settings) -> BaseVisionClient:
        """Create a client for ``settings.vision_provider``.

        Raises:
            ConfigurationError: unknown provider, missing or placeholder key,
                or an ``openai_compatible`` provider without a base URL.
        """
        provider = settings.vision_provider.lower()
        if provider not in cls.SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unknown vision provider '{provider}'. "
                f"Choose from: {list(cls.SUPPORTED_PROVIDERS)}"
            )
        if provider == "example":
            return ExampleClientAdapter()

        api_key = cls._require_api_key(provider, settings)
        if provider == "gemini":
            return GeminiClientAdapter(
                api_key=api_key,
                model=settings.gemini_model_name,
                timeout_seconds=settings.request_timeout_seconds,
                api_base_url=settings.gemini_api_base_url,
                upload_base_url=settings.gemini_upload_base_url,
                max_output_tokens=settings.gemini_max_output_tokens,
                poll_interval_seconds=settings.upload_poll_interval_seconds,
                poll_max_attempts=settings.upload_poll_max_attempts,
                inline_pdf_max_bytes=settings.inline_pdf_max_bytes,
            )
        return OpenAIClientAdapter(
            api_key=api_key,
            model=settings.openai_model_name,
            timeout_seconds=settings.request_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
            poll_interval_seconds=settings.upload_poll_interval_seconds,
            poll_max_attempts=settings.upload_poll_max_attempts,
            chunk_size_bytes=settings.upload_chunk_size_bytes,
            inline_pdf_max_bytes=settings.inline_pdf_max_bytes,
        )

    @classmethod
    def _require_api_key(cls, provider: str, settings: Settings) -> str:
        key = settings.api_key_for_provider().strip()
        if not key or key.lower() in cls.PLACEHOLDER_API_KEYS:
            env_name = "GEMINI_API_KEY" if provider == "gemini" else "OPENAI_API_KEY"
            raise ConfigurationError(
                f"Please set your API key for vision provider '{provider}' ({env_name})"
            )
        return key

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        url = settings.openai_base_url.strip()
        if not url:
            raise ConfigurationError(
                "openai_base_url is required for vision_provider=openai_compatible"
            )
        return url
