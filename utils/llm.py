"""Claude API client for chat completion and structured JSON generation."""

import asyncio
import json
import logging
import os
import re

import anthropic

from config.defaults import DEFAULTS
from core.contracts import Completion

log = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n<!-- TRUNCATED: Response hit token limit -->"

JSON_SYSTEM_PROMPT = (
    "You are a JSON generator. Generate ONLY valid JSON matching this schema:\n{schema}\n\n"
    "No markdown fences, no commentary."
)


class CompletionError(RuntimeError):
    """The completion service failed or returned an unusable response."""


def get_client():
    """Return an async Anthropic client. Raises if no API key is set."""
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError(
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Get a key at https://console.anthropic.com/ and run:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'"
        )
    return anthropic.AsyncAnthropic(api_key=api_key)


def strip_fences(text):
    """Remove a surrounding markdown fence if the model added one anyway."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = re.sub(r"^```\w*\n?", "", cleaned)
        cleaned = re.sub(r"\n?```$", "", cleaned)
    return cleaned


def _split_system(messages):
    """Anthropic takes the system prompt separately from the chat turns."""
    system = "\n\n".join(m["content"] for m in messages if m.get("role") == "system")
    chat = [
        {"role": m["role"], "content": m["content"]}
        for m in messages if m.get("role") != "system"
    ]
    return system, chat


class AnthropicCompletionClient:
    """Completion adapter over the Anthropic messages API.

    Calls are capped by a per-event-loop semaphore so concurrent workflows
    cannot flood the service. The underlying SDK client is created lazily,
    which lets callers build the adapter without an API key and only fail
    when a completion is actually requested.
    """

    name = "completion"

    def __init__(self, model=None, client=None, max_concurrency=None, retry_delay=None):
        self.model = model or DEFAULTS["model"]
        self.max_concurrency = max_concurrency or DEFAULTS["max_concurrent_completions"]
        self.retry_delay = DEFAULTS["retry_delay"] if retry_delay is None else retry_delay
        self._injected_client = client
        self._client = client
        self._semaphore = None
        self._loop = None

    def _bind(self):
        # httpx pools and asyncio primitives belong to one loop; each asyncio.run
        # call brings a new one.
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            stale, stale_loop = self._client, self._loop
            self._loop = loop
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
            if self._injected_client is None:
                self._client = None
                if stale is not None and stale_loop is not None and stale_loop.is_running():
                    asyncio.run_coroutine_threadsafe(stale.close(), stale_loop)
        if self._client is None:
            self._client = get_client()
        return self._client, self._semaphore

    async def aclose(self):
        """Close the SDK client this adapter created; injected clients are left alone."""
        if self._client is not None and self._injected_client is None:
            await self._client.close()
        self._client = self._injected_client
        self._loop = None
        self._semaphore = None

    async def complete(self, messages, temperature=None, max_tokens=None):
        """Send chat messages and return the generated text as a Completion."""
        client, semaphore = self._bind()
        system, chat = _split_system(messages)
        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens or DEFAULTS["max_tokens"],
            "temperature": DEFAULTS["temperature"] if temperature is None else temperature,
            "messages": chat,
        }
        if system:
            kwargs["system"] = system

        for attempt in range(2):
            try:
                async with semaphore:
                    # Streaming avoids the SDK's timeout guard for large max_tokens
                    text = ""
                    async with client.messages.stream(**kwargs) as stream:
                        async for chunk in stream.text_stream:
                            text += chunk
                        message = await stream.get_final_message()
                break
            except anthropic.APIError as e:
                if attempt == 0:
                    log.warning("Completion call failed, retrying in %ss: %s", self.retry_delay, e)
                    await asyncio.sleep(self.retry_delay)
                    continue
                raise CompletionError(f"Completion service error: {e}") from e

        if message.stop_reason == "max_tokens":
            log.warning("Completion hit the token limit (%d), output may be incomplete", kwargs["max_tokens"])
            text += TRUNCATION_MARKER

        usage = {}
        if getattr(message, "usage", None) is not None:
            prompt_tokens = message.usage.input_tokens or 0
            completion_tokens = message.usage.output_tokens or 0
            usage = {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            }
        return Completion(content=text, model=getattr(message, "model", self.model), usage=usage)

    async def generate_json(self, prompt, schema):
        """Ask for JSON matching ``schema`` and return the parsed value."""
        messages = [
            {"role": "system", "content": JSON_SYSTEM_PROMPT.format(schema=json.dumps(schema, indent=2))},
            {"role": "user", "content": prompt},
        ]
        completion = await self.complete(
            messages,
            temperature=DEFAULTS["json_temperature"],
            max_tokens=DEFAULTS["json_max_tokens"],
        )
        try:
            return json.loads(strip_fences(completion.content))
        except json.JSONDecodeError as e:
            raise CompletionError("Completion service returned invalid JSON") from e
