import logging

from openai import OpenAI, OpenAIError

from notegraph.errors import TransportError

logger = logging.getLogger(__name__)


class OpenAITextCompletion:
    def __init__(self, client: OpenAI, model: str = "gpt-4o-mini", temperature: float = 0.7):
        self.client = client
        self.model = model
        self.temperature = temperature

    def complete(self, prompt: str, system: str | None = None) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise TransportError(f"Language model request failed: {e}") from e

        return response.choices[0].message.content or ""
