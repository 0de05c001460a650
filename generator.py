"""
Recipe text generators.

GeminiRecipeGenerator calls Gemini through LangChain; MeteredGenerator wraps
any generator and records latency and outcome of every call.
"""

import asyncio
import os
import time

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from loguru import logger

from config import GENERATOR_TIMEOUT_SECONDS, PLANNER_MODEL, PLANNER_TEMPERATURE
from errors import GeneratorCallFailure, PersistenceFailure


def _content_text(content) -> str:
    """Flatten a chat message content (string or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type", "text") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class GeminiRecipeGenerator:
    """
    Generator backed by a Gemini chat model.

    Attributes:
        model (str): Model name, also used for metering.
        timeout (float): Seconds before a call counts as failed.
        llm: The LangChain chat model.
    """

    def __init__(
        self,
        model=PLANNER_MODEL,
        temperature=PLANNER_TEMPERATURE,
        api_key=None,
        timeout=GENERATOR_TIMEOUT_SECONDS,
        llm=None,
    ):
        self.model = model
        self.timeout = timeout
        self.llm = llm or ChatGoogleGenerativeAI(
            model=model,
            temperature=temperature,
            google_api_key=api_key or os.getenv("GOOGLE_API_KEY"),
        )

    async def generate(self, prompt: str) -> str:
        """
        Send one prompt and return the answer text.

        Raises:
            GeneratorCallFailure: On timeout or any provider error.
        """
        try:
            response = await asyncio.wait_for(
                self.llm.ainvoke([HumanMessage(content=prompt)]), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise GeneratorCallFailure(f"Generator timed out after {self.timeout:g}s") from e
        except Exception as e:
            raise GeneratorCallFailure(f"Generator call failed: {e}") from e
        return _content_text(response.content).strip()


class MeteredGenerator:
    """Wraps a generator and stores one api_usage row per call."""

    def __init__(self, inner, db=None, endpoint="meal-plan-generate"):
        self.inner = inner
        self.db = db
        self.endpoint = endpoint
        self.model = getattr(inner, "model", "unknown")

    async def generate(self, prompt: str) -> str:
        start = time.perf_counter()
        status, text = "error", ""
        try:
            text = await self.inner.generate(prompt)
            status = "ok"
            return text
        finally:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            logger.debug(
                f"{self.endpoint}: {self.model} answered in {elapsed_ms} ms ({status}, {len(text)} chars)"
            )
            if self.db is not None:
                try:
                    self.db.record_api_usage(
                        self.endpoint, self.model, elapsed_ms, status, len(prompt), len(text)
                    )
                except PersistenceFailure as e:
                    logger.warning(f"Could not record generator usage: {e}")
