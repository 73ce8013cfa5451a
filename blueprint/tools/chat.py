from typing import List

from blueprint.config import settings
from blueprint.errors import GenerationError
from blueprint.models.analysis import StructuredAnalysis
from blueprint.models.responses import ChatMessage
from blueprint.services.llm import GeminiClient, llm
from blueprint.services.logger import logger
from blueprint.tools.prompts import build_chat_prompt


class ChatService:
    """Answers questions about an already generated blueprint."""

    def __init__(self, client: GeminiClient | None = None, history_limit: int | None = None):
        self.client = client or llm
        self.history_limit = history_limit or settings.CHAT_HISTORY_LIMIT

    async def reply(self, handle: str, persona: StructuredAnalysis, messages: List[ChatMessage]) -> str:
        prompt = build_chat_prompt(handle, persona, messages[-self.history_limit:])
        try:
            reply = await self.client.generate(prompt)
        except GenerationError as e:
            logger.error(f"Chat Gemini error: {e.message}")
            raise
        return reply.strip()

chat_service = ChatService()
