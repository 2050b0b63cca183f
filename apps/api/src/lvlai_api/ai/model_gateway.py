"""
Model gateway: text completion over one of the configured AI providers.

Both providers speak the OpenAI chat-completions protocol, so a provider is
just a tagged record (name, credential, endpoint, model) and the only
capability is ``complete``. Nothing is retried and no conversation state is
kept between calls.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from openai import (
    APIConnectionError,
    APIError,
    AuthenticationError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)

from lvlai_api.common.error_handlers import (
    ConfigurationError,
    ProviderError,
    ValidationError,
)
from lvlai_api.config import settings

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000


class ProviderName(str, Enum):
    """Supported AI providers, in order of preference"""

    DEEPSEEK = "deepseek"
    OPENROUTER = "openrouter"


@lru_cache(maxsize=None)
def get_client(api_key: str, base_url: str) -> OpenAI:
    """One SDK client (and connection pool) per provider endpoint"""
    return OpenAI(api_key=api_key, base_url=base_url, max_retries=0)


@dataclass(frozen=True)
class CompletionOptions:
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS


@dataclass(frozen=True)
class ModelProvider:
    """A configured provider endpoint"""

    name: ProviderName
    api_key: str
    base_url: str
    model: str

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        options: CompletionOptions | None = None,
    ) -> str:
        """Send a system + user prompt pair and return the completion text"""
        options = options or CompletionOptions()
        client = get_client(self.api_key, self.base_url)

        logger.info(
            f"Calling {self.name.value} (model: {self.model}, "
            f"temperature: {options.temperature}, max_tokens: {options.max_tokens})"
        )
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=options.temperature,
                max_tokens=options.max_tokens,
            )
        except RateLimitError as e:
            logger.warning(f"{self.name.value} rate limit exceeded: {e}")
            raise ProviderError(self.name.value, f"Rate limit exceeded: {e}") from e
        except AuthenticationError as e:
            logger.error(f"{self.name.value} authentication failed: {e}")
            raise ProviderError(self.name.value, f"Authentication failed: {e}") from e
        except APIConnectionError as e:
            logger.error(f"{self.name.value} connection failed: {e}")
            raise ProviderError(self.name.value, f"Connection failed: {e}") from e
        except APIError as e:
            logger.error(
                f"{self.name.value} API error - status: "
                f"{getattr(e, 'status_code', 'N/A')}, message: {e}"
            )
            raise ProviderError(self.name.value, str(e)) from e
        except OpenAIError as e:
            logger.error(f"{self.name.value} client error: {e}")
            raise ProviderError(self.name.value, str(e)) from e

        content = None
        if response.choices:
            content = response.choices[0].message.content
        if not content or not content.strip():
            logger.error(f"{self.name.value} returned an empty completion")
            raise ProviderError(self.name.value, "No response from AI model")

        logger.info(f"Response received from {self.name.value} ({len(content)} chars)")
        return content


def configured_providers() -> dict[ProviderName, ModelProvider]:
    """Providers whose credential is set, in preference order"""
    providers: dict[ProviderName, ModelProvider] = {}
    if settings.deepseek_api_key:
        providers[ProviderName.DEEPSEEK] = ModelProvider(
            name=ProviderName.DEEPSEEK,
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            model=settings.deepseek_model,
        )
    if settings.openrouter_api_key:
        providers[ProviderName.OPENROUTER] = ModelProvider(
            name=ProviderName.OPENROUTER,
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            model=settings.openrouter_model,
        )
    return providers


def parse_provider_name(value: str | ProviderName | None) -> ProviderName | None:
    """Resolve a caller-supplied provider name; None means automatic selection"""
    if value is None or isinstance(value, ProviderName):
        return value
    try:
        return ProviderName(value.strip().lower())
    except ValueError:
        allowed = ", ".join(p.value for p in ProviderName)
        raise ValidationError(
            f"Unknown AI provider '{value}'. Expected one of: {allowed}",
            field="provider",
        ) from None


def select_provider(override: str | ProviderName | None = None) -> ModelProvider:
    """
    Pick the provider for a call.

    An explicit override wins if its credential is configured; otherwise the
    first configured provider (DeepSeek, then OpenRouter) is used.

    Raises:
        ConfigurationError: no usable credential is configured
        ValidationError: the override does not name a known provider
    """
    requested = parse_provider_name(override)
    providers = configured_providers()

    if requested is not None:
        provider = providers.get(requested)
        if provider is None:
            raise ConfigurationError(
                f"AI provider '{requested.value}' is not configured. "
                f"Please set {requested.value.upper()}_API_KEY"
            )
        return provider

    if not providers:
        raise ConfigurationError(
            "No AI provider configured. "
            "Please set either DEEPSEEK_API_KEY or OPENROUTER_API_KEY"
        )
    return next(iter(providers.values()))


def check_provider(override: str | ProviderName | None = None) -> dict[str, str]:
    """Check that a provider answers a trivial prompt"""
    provider = select_provider(override)
    label = "DeepSeek" if provider.name == ProviderName.DEEPSEEK else "OpenRouter"
    try:
        response = provider.complete(
            "You are a helpful assistant.",
            f"Say 'Hello from {label}!' if you can hear me.",
        )
        return {"provider": provider.name.value, "status": "connected", "response": response}
    except ProviderError as e:
        logger.error(f"Provider test failed for {provider.name.value}: {e.message}")
        return {"provider": provider.name.value, "status": "error", "response": e.detail}
