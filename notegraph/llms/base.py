from typing import Protocol


class TextCompletion(Protocol):
    def complete(self, prompt: str, system: str | None = None) -> str:
        """Send one prompt and return the raw text of the reply.

        Raises TransportError when the service fails or times out.
        """
        ...
