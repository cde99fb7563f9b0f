# llm/client.py
"""
LLM Client
Single entry point for text generation:
- If OPENAI_API_KEY is set: use OpenAI chat completions
- If no OPENAI_API_KEY: use Ollama (llama3.2) over HTTP
"""

from typing import Dict, List, Optional

import httpx
from loguru import logger
from openai import AsyncOpenAI

from ..config import settings
from ..exceptions import LLMError


class LLMClient:
    """
    Thin async wrapper around the configured provider.

    Every failure (network, provider error, empty text) is raised as
    LLMError so callers can fall back to canned answers.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        ollama_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.api_key = api_key if api_key is not None else settings.openai_key
        self.ollama_url = (ollama_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self._http_client = http_client
        self._openai: Optional[AsyncOpenAI] = None

        if self.api_key:
            self._model = model or settings.OPENAI_MODEL
            self._openai = AsyncOpenAI(api_key=self.api_key, timeout=settings.LLM_TIMEOUT)
            logger.info(f"LLM Provider: OpenAI ({self._model})")
        else:
            self._model = model or settings.OLLAMA_MODEL
            logger.info(f"LLM Provider: Ollama ({self._model})")

    @property
    def provider(self) -> str:
        return "openai" if self._openai else "ollama"

    @property
    def model(self) -> str:
        return self._model

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        history: Optional[List[Dict[str, str]]] = None,
        temperature: float = 0.7,
        max_tokens: int = 500
    ) -> str:
        """
        Generate a completion.

        Args:
            prompt: The user turn (or a complete single-shot prompt)
            system: Optional system prompt
            history: Prior turns as {"role": "user"|"assistant", "content": ...}
            temperature: Sampling temperature
            max_tokens: Completion token cap

        Returns:
            str: Stripped model text

        Raises:
            LLMError: provider failure or empty output
        """
        if self._openai:
            text = await self._call_openai(prompt, system, history, temperature, max_tokens)
        else:
            text = await self._call_ollama(prompt, system, history, temperature, max_tokens)

        text = (text or "").strip()
        if not text:
            raise LLMError(f"{self.provider} returned an empty response")

        logger.debug(f"LLM raw output: {text[:200]}")
        return text

    async def _call_openai(self, prompt, system, history, temperature, max_tokens) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        for msg in history or []:
            messages.append({"role": msg["role"], "content": msg["content"]})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self._openai.chat.completions.create(
                model=self._model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature
            )
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise LLMError("OpenAI returned no choices")
        return response.choices[0].message.content or ""

    async def _call_ollama(self, prompt, system, history, temperature, max_tokens) -> str:
        # Ollama /api/generate takes one prompt string
        full_prompt = f"{system}\n\n" if system else ""
        for msg in history or []:
            role = "User" if msg["role"] == "user" else "Assistant"
            full_prompt += f"{role}: {msg['content']}\n"
        full_prompt += f"User: {prompt}\nAssistant:" if history else prompt

        payload = {
            "model": self._model,
            "prompt": full_prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens
            }
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.post(f"{self.ollama_url}/api/generate", json=payload)
            else:
                async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT) as client:
                    response = await client.post(f"{self.ollama_url}/api/generate", json=payload)
        except httpx.ConnectError as e:
            logger.error("Cannot connect to Ollama. Make sure Ollama is running.")
            raise LLMError("Ollama is not reachable") from e
        except httpx.HTTPError as e:
            logger.error(f"Ollama API error: {e}")
            raise LLMError(f"Ollama request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Ollama error: {response.status_code}")
            raise LLMError(f"Ollama returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Ollama returned a non-JSON body: {response.text[:200]}")
            raise LLMError("Ollama returned an invalid response") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            logger.error(f"Unexpected Ollama payload: {str(data)[:200]}")
            raise LLMError("Ollama returned an invalid response")
        return text


# ============================================
# Global Instance
# ============================================

_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the global LLM client"""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
