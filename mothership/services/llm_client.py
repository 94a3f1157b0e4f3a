"""Async Anthropic API wrapper with retry, logging, and forced tool calls."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any

import anthropic
import httpx

from mothership.config import settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 529})

# Created on first call
_client: anthropic.AsyncAnthropic | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    global _client
    if _client is None:
        _client = anthropic.AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            timeout=httpx.Timeout(settings.llm_timeout_seconds, connect=10.0),
        )
    return _client


def load_prompt(name: str) -> str:
    """Load a prompt template from mothership/prompts/{name}.txt."""
    prompt_path = Path(__file__).parent.parent / "prompts" / f"{name}.txt"
    return prompt_path.read_text(encoding="utf-8")


async def call_tool(
    system: str,
    user_message: str,
    tool: dict[str, Any],
    max_tokens: int = 4000,
) -> dict[str, Any] | None:
    """Force the model to call `tool` and return the tool input.

    Returns None when the response carries no tool call.
    """
    response = await _create_tool_message(tool, system, user_message, max_tokens)
    for block in response.content:
        if block.type == "tool_use" and block.name == tool["name"]:
            return dict(block.input)
    logger.warning("LLM returned no tool call | tool=%s | stop=%s", tool["name"], response.stop_reason)
    return None


async def _create_tool_message(
    tool: dict[str, Any],
    system: str,
    user_message: str,
    max_tokens: int,
):
    """One forced tool call, retried on transient API failures.

    A hard timeout raises TimeoutError without a retry.
    """
    client = _get_client()
    model = settings.claude_model
    tool_name = tool["name"]
    max_attempts = settings.llm_max_retries + 1
    last_error: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    system=system,
                    messages=[{"role": "user", "content": user_message}],
                    tools=[tool],
                    tool_choice={"type": "tool", "name": tool_name},
                ),
                timeout=settings.llm_timeout_seconds,
            )
        except asyncio.TimeoutError:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.warning("LLM timeout | tool=%s | %dms", tool_name, elapsed_ms)
            raise TimeoutError(f"LLM timeout after {elapsed_ms}ms")
        except anthropic.APIStatusError as e:
            last_error = e
            retry = e.status_code in RETRYABLE_STATUS and attempt < max_attempts
            logger.warning(
                "LLM error | tool=%s | status=%d | attempt=%d/%d | retry=%s | %s",
                tool_name, e.status_code, attempt, max_attempts, retry, str(e)[:200],
            )
            if retry:
                continue
            raise
        except (anthropic.APITimeoutError, anthropic.APIConnectionError) as e:
            last_error = e
            logger.warning(
                "LLM connection error | tool=%s | attempt=%d/%d | %s",
                tool_name, attempt, max_attempts, str(e)[:200],
            )
            if attempt < max_attempts:
                continue
            raise

        usage = response.usage
        logger.info(
            "LLM OK | tool=%s | model=%s | stop=%s | tokens_in=%d tokens_out=%d | %dms",
            tool_name, model, response.stop_reason, usage.input_tokens, usage.output_tokens,
            int((time.monotonic() - start) * 1000),
        )
        return response

    raise last_error or RuntimeError(f"LLM call failed after {max_attempts} attempts")
