import asyncio
import httpx
from blueprint.config import settings
from blueprint.errors import GenerationAuthError, GenerationError, GenerationExhausted
from blueprint.services.fallback import CandidateChain, CandidatesExhausted
from blueprint.services.logger import logger
from typing import Any, Dict, List, Tuple

AUTH_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED"}

class GeminiClient:
    """
    Gemini REST client that walks an API-version x model matrix.

    Each cell is tried exactly once per call. Credential failures end the
    walk immediately; anything else (unknown model, timeout, 5xx, empty
    candidates) moves on to the next cell.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_versions: List[str] | None = None,
        models: List[str] | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.api_versions = api_versions or settings.GEMINI_API_VERSIONS
        self.models = models or settings.GEMINI_MODELS
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.GENERATION_TIMEOUT
        self._transport = transport

    def matrix(self) -> List[Tuple[str, str]]:
        return [(version, model) for version in self.api_versions for model in self.models]

    async def generate(self, prompt: str, timeout: float | None = None) -> str:
        """
        Returns the generated text from the first matrix cell that answers.
        Raises GenerationAuthError on a credential problem and
        GenerationExhausted once every cell has failed.
        """
        if not self.api_key:
            raise GenerationAuthError("GEMINI_API_KEY is not defined")

        timeout = timeout or self.timeout
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            chain = CandidateChain(
                [(f"{version}/{model}", self._bind(client, version, model, prompt, timeout)) for version, model in self.matrix()],
                fatal=(GenerationAuthError,),
                skip=(GenerationError, httpx.HTTPError, asyncio.TimeoutError),
                accept=bool,
                name="gemini",
            )
            try:
                return await chain.arun()
            except CandidatesExhausted as e:
                recent = e.last(3)
                raise GenerationExhausted(
                    "All Gemini models failed. Errors:\n" + "\n".join(recent),
                    failures=recent,
                ) from e

    def _bind(self, client: httpx.AsyncClient, version: str, model: str, prompt: str, timeout: float):
        # httpx times each phase separately; this caps the whole cell
        return lambda: asyncio.wait_for(self._call(client, version, model, prompt), timeout)

    async def _call(self, client: httpx.AsyncClient, version: str, model: str, prompt: str) -> str:
        logger.info(f"Trying Gemini: {version}/{model}")
        url = f"{self.base_url}/{version}/models/{model}:generateContent"
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": 0.7,
                "topP": 0.95,
                "maxOutputTokens": 2048,
            },
        }

        try:
            resp = await client.post(url, headers={"x-goog-api-key": self.api_key}, json=body)
        except httpx.TimeoutException:
            logger.warning(f"Gemini {version}/{model} timed out")
            raise

        try:
            data: Dict[str, Any] = resp.json()
        except ValueError:
            data = {}
        error = data.get("error") if isinstance(data, dict) else None

        if not resp.is_success or error:
            error = error if isinstance(error, dict) else {}
            message = error.get("message") or f"HTTP {resp.status_code}"
            failure = f"[{resp.status_code}] {message}"
            logger.warning(f"Failed {version}/{model}: {failure}")
            if self._is_auth_failure(resp.status_code, error.get("status", ""), message):
                raise GenerationAuthError(f"API Key Error: {failure}")
            raise GenerationError(failure)

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None
        if not text:
            raise GenerationError("Empty response from Gemini")

        logger.info(f"Success with {version}/{model}")
        return text

    @staticmethod
    def _is_auth_failure(status_code: int, status: str, message: str) -> bool:
        # An unknown model is a 404 and must never abort the walk
        if status_code == 404:
            return False
        return status_code in (401, 403) or status in AUTH_STATUSES or "api key" in message.lower()

llm = GeminiClient()
