"""Tests for the LLM client: prompt loading and forced tool calls."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from mothership.services.llm_client import call_tool, load_prompt

TOOL = {"name": "extract_problems", "description": "d", "input_schema": {"type": "object"}}


def _response(*blocks, stop_reason="tool_use"):
    return SimpleNamespace(
        content=list(blocks),
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=120, output_tokens=40),
    )


def _client(create):
    client = MagicMock()
    client.messages.create = create
    return client


def _status_error(code):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return anthropic.APIStatusError("overloaded", response=httpx.Response(code, request=request), body=None)


class TestLoadPrompt:
    @pytest.mark.parametrize("name", ["tiktok_extractor", "reddit_analyzer", "hidden_insight"])
    def test_prompts_exist(self, name):
        assert len(load_prompt(name)) > 100

    def test_reddit_prompt_has_subreddit_slot(self):
        assert "{subreddit}" in load_prompt("reddit_analyzer")

    def test_missing_prompt(self):
        with pytest.raises(FileNotFoundError):
            load_prompt("nonexistent")


class TestCallTool:
    @pytest.mark.asyncio
    async def test_returns_tool_input(self):
        create = AsyncMock(return_value=_response(
            SimpleNamespace(type="text", text="thinking"),
            SimpleNamespace(type="tool_use", name="extract_problems", input={"problems": []}),
        ))
        with patch("mothership.services.llm_client._get_client", return_value=_client(create)):
            result = await call_tool(system="sys", user_message="hi", tool=TOOL)

        assert result == {"problems": []}
        kwargs = create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": "extract_problems"}
        assert kwargs["tools"] == [TOOL]
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_no_tool_call(self, caplog):
        create = AsyncMock(return_value=_response(SimpleNamespace(type="text", text="no"), stop_reason="max_tokens"))
        with patch("mothership.services.llm_client._get_client", return_value=_client(create)):
            assert await call_tool(system="sys", user_message="hi", tool=TOOL) is None
        assert "stop=max_tokens" in caplog.text

    @pytest.mark.asyncio
    async def test_retries_transient_status(self):
        ok = _response(SimpleNamespace(type="tool_use", name="extract_problems", input={"problems": [1]}))
        create = AsyncMock(side_effect=[_status_error(503), ok])
        with patch("mothership.services.llm_client._get_client", return_value=_client(create)):
            result = await call_tool(system="sys", user_message="hi", tool=TOOL)
        assert result == {"problems": [1]}
        assert create.await_count == 2

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        create = AsyncMock(side_effect=_status_error(400))
        with patch("mothership.services.llm_client._get_client", return_value=_client(create)):
            with pytest.raises(anthropic.APIStatusError):
                await call_tool(system="sys", user_message="hi", tool=TOOL)
        assert create.await_count == 1

    @pytest.mark.asyncio
    async def test_logs_tool_and_stop_reason(self, caplog):
        create = AsyncMock(return_value=_response(
            SimpleNamespace(type="tool_use", name="extract_problems", input={"problems": []}),
        ))
        with caplog.at_level("INFO", logger="mothership.services.llm_client"):
            with patch("mothership.services.llm_client._get_client", return_value=_client(create)):
                await call_tool(system="sys", user_message="hi", tool=TOOL)
        assert "tool=extract_problems" in caplog.text
        assert "stop=tool_use" in caplog.text

