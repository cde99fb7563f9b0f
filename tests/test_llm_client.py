"""Tests for LLMClient with stubbed OpenAI and Ollama backends."""

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest

from aibookify.exceptions import LLMError
from aibookify.llm import LLMClient, hotel_assistant_system_prompt


def ollama_generate(handler, **kwargs) -> str:
    async def call():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = LLMClient(api_key="", model="llama3.2", ollama_url="http://ollama.test/", http_client=http_client)
            assert client.provider == "ollama"
            return await client.generate(**kwargs)
    return asyncio.run(call())


class TestOllama:

    def test_prompt_is_flattened(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["payload"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "  Hello there  "})

        text = ollama_generate(
            handler,
            prompt="Is the pool heated?",
            system="You are a hotel assistant.",
            history=[{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Welcome!"}],
            temperature=0.3,
            max_tokens=150
        )

        assert text == "Hello there"
        assert seen["url"] == "http://ollama.test/api/generate"
        payload = seen["payload"]
        assert payload["model"] == "llama3.2"
        assert payload["stream"] is False
        assert payload["options"] == {"temperature": 0.3, "num_predict": 150}
        assert payload["prompt"] == (
            "You are a hotel assistant.\n\n"
            "User: Hi\nAssistant: Welcome!\n"
            "User: Is the pool heated?\nAssistant:"
        )

    def test_single_shot_prompt_is_sent_as_is(self):
        seen = {}

        def handler(request):
            seen["payload"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "{}"})

        ollama_generate(handler, prompt="Return JSON")
        assert seen["payload"]["prompt"] == "Return JSON"

    @pytest.mark.parametrize("response", [
        httpx.Response(500, text="model not loaded"),
        httpx.Response(200, json={"response": "   "}),
        httpx.Response(200, text="<html>proxy</html>"),
        httpx.Response(200, json=[1, 2]),
        httpx.Response(200, json={"done": True}),
    ])
    def test_bad_responses_raise(self, response):
        with pytest.raises(LLMError):
            ollama_generate(lambda request: response, prompt="hi")

    def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LLMError):
            ollama_generate(handler, prompt="hi")


class FakeCompletions:

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def openai_client(completions: FakeCompletions) -> LLMClient:
    client = LLMClient(api_key="sk-test-key", model="gpt-4o-mini")
    client._openai = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return client


class TestOpenAI:

    def test_messages_and_settings(self):
        completions = FakeCompletions(content="Yes, it is heated.")
        client = openai_client(completions)

        assert client.provider == "openai"
        text = asyncio.run(client.generate(
            "Is the pool heated?",
            system="sys",
            history=[{"role": "user", "content": "Hi"}],
            temperature=0.3,
            max_tokens=150
        ))

        assert text == "Yes, it is heated."
        assert completions.kwargs["model"] == "gpt-4o-mini"
        assert completions.kwargs["max_tokens"] == 150
        assert completions.kwargs["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "Hi"},
            {"role": "user", "content": "Is the pool heated?"},
        ]

    def test_provider_errors_raise(self):
        client = openai_client(FakeCompletions(error=RuntimeError("rate limited")))
        with pytest.raises(LLMError):
            asyncio.run(client.generate("hi"))

    def test_empty_content_raises(self):
        client = openai_client(FakeCompletions(content=None))
        with pytest.raises(LLMError):
            asyncio.run(client.generate("hi"))


class TestHotelAssistantPrompt:

    def test_context_fields(self):
        prompt = hotel_assistant_system_prompt({
            "name": "Sarova Stanley",
            "location": "Nairobi",
            "priceRange": "$180/night",
            "amenities": ["pool", "spa"],
        })
        assert "AI hotel assistant for Sarova Stanley" in prompt
        assert "Amenities: pool, spa" in prompt
        assert "Available Rooms: N/A" in prompt

    def test_empty_context(self):
        prompt = hotel_assistant_system_prompt(None)
        assert "this hotel" in prompt
        assert "Location: N/A" in prompt
