import json
import logging
from typing import Any, Dict, Optional

from langchain_core.output_parsers import StrOutputParser
from langchain_core.utils.json import parse_json_markdown
from langchain_mistralai.chat_models import ChatMistralAI

from recruitform.config import LLMConfig, get_llm_config
from recruitform.errors import GatewayError

logger = logging.getLogger(__name__)


def load_json_reply(text: str) -> Dict[str, Any]:
    """
    Strip ```json fences from a model reply and parse the JSON object inside.

    Parsing is strict: truncated or otherwise malformed JSON is not repaired.
    Raises:
        ValueError: If the reply is not a JSON object.
    """
    parsed = parse_json_markdown(text.strip(), parser=json.loads)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}.")
    return parsed


class LLMManager:
    """
    Gateway to the text-generation model shared by structuring and scoring.

    Every call is a single attempt; any failure surfaces as GatewayError.
    """

    def __init__(self, config: Optional[LLMConfig] = None):
        config = config or get_llm_config()
        self.model_name = config.MODEL_NAME_EVAL
        self.chat_model = ChatMistralAI(
            api_key=config.MISTRAL_API_KEY,
            model_name=config.MODEL_NAME_EVAL,
            temperature=0,
            max_retries=config.MAX_RETRIES,
        )
        self.completion_chain = self.chat_model | StrOutputParser()

    async def complete(self, prompt: str) -> str:
        try:
            text = await self.completion_chain.ainvoke(prompt)
        except Exception as e:
            logger.error("LLM call failed (model=%s): %s", self.model_name, e)
            raise GatewayError(f"Language model call failed: {e}") from e

        if not text or not text.strip():
            logger.error("LLM returned an empty reply (model=%s).", self.model_name)
            raise GatewayError("Language model returned an empty reply.")

        return text
