import logging

from anthropic import Anthropic, APIError

from notegraph.errors import TransportError

logger = logging.getLogger(__name__)


class AnthropicTextCompletion:
    def __init__(
        self,
        client: Anthropic,
        model: str = "claude-3-5-sonnet-20241022",
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def complete(self, prompt: str, system: str | None = None) -> str:
        kwargs = {}
        if system:
            kwargs["system"] = system
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except APIError as e:
            logger.error(f"Anthropic request failed: {e}")
            raise TransportError(f"Language model request failed: {e}") from e

        return "".join(block.text for block in response.content if block.type == "text")
