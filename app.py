import sys

from anthropic import Anthropic
from loguru import logger
from openai import OpenAI

from notegraph.api import create_app, serve
from notegraph.config import settings
from notegraph.llms.anthropic_completion import AnthropicTextCompletion
from notegraph.llms.base import TextCompletion
from notegraph.llms.openai_completion import OpenAITextCompletion
from notegraph.stores.local_db import LocalGraphStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])


def get_llm() -> TextCompletion:
    if settings.llm_provider == "openai":
        logger.info(f"Initializing OpenAI completion with model {settings.llm_model}")
        openai_client = OpenAI(
            api_key=settings.openai_api_key, timeout=settings.llm_timeout_seconds, max_retries=0
        )
        return OpenAITextCompletion(openai_client, model=settings.llm_model)

    logger.info(f"Initializing Claude completion with model {settings.llm_model}")
    anthropic_client = Anthropic(
        api_key=settings.anthropic_api_key, timeout=settings.llm_timeout_seconds, max_retries=0
    )
    return AnthropicTextCompletion(
        anthropic_client, model=settings.llm_model, max_tokens=settings.llm_max_tokens
    )


store = LocalGraphStore(settings.local_graph_store_path)
app = create_app(store=store, llm=get_llm())

if __name__ == "__main__":
    serve(app)
