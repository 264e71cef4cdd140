"""Chat glue — flattens history, calls OpenAI, runs tool calls, extracts the reply."""
import json
import logging
from typing import Any, Iterable, List, Optional

from openai import AsyncOpenAI

from .config import Settings
from .protocol import ConversationTurn
from .tools import openai_tools, execute_tool, tool_descriptions_for_llm, RaribleClient
from .tools.rarible import dig, first_of

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm sorry, I couldn't generate a response. Please try again."

SYSTEM_PROMPT = """You are an NFT market assistant. The user's message follows the conversation so far, one "role: content" line per turn.
When a question needs live marketplace data (floor prices, collection stats, activity, ownership, orders, trending collections), call the matching tool.
Tool results arrive as JSON with either a "data" or an "error" key; if a tool reports an error, say so plainly instead of guessing.
Prices are in ETH unless a currency is given. Answer concisely in the user's language.

Available tools:
{tool_list}"""


def system_prompt(settings: Settings) -> str:
    """System prompt, listing the tools only when they are offered."""
    tool_list = tool_descriptions_for_llm() if settings.enable_tools else "none"
    return SYSTEM_PROMPT.replace("{tool_list}", tool_list)


def build_input(message: str, history: Optional[Iterable[ConversationTurn]] = None) -> str:
    """Flatten history plus the new message into one prompt string."""
    lines = [f"{turn.role}: {turn.content}" for turn in history or []]
    context = "\n".join(lines) + "\n" if lines else ""
    return context + f"user: {message}"


def _output_text(data: Any) -> Optional[str]:
    output = dig(data, "output")
    if not isinstance(output, list):
        return None
    for item in output:
        if (isinstance(item, dict) and item.get("type") == "message"
                and item.get("role") == "assistant" and isinstance(item.get("content"), list)):
            return " ".join(
                part.get("text", "") for part in item["content"]
                if isinstance(part, dict) and part.get("type") == "output_text"
            )
    return None


def _content_text(data: Any) -> Optional[str]:
    content = dig(data, "content")
    if not isinstance(content, list):
        return None
    return " ".join(
        part.get("text", "") for part in content
        if isinstance(part, dict) and part.get("type") == "text"
    )


def _as_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


REPLY_EXTRACTORS = [
    _output_text,
    _content_text,
    lambda data: _as_text(dig(data, "message")),
    lambda data: _as_text(dig(data, "choices", 0, "message", "content")),
    lambda data: _as_text(data),
]


def extract_reply(data: Any) -> str:
    """First non-empty text across the known provider response shapes."""
    reply = first_of(data, [lambda d, f=f: (f(d) or "").strip() or None for f in REPLY_EXTRACTORS])
    return reply or FALLBACK_REPLY


def _get_client(settings: Settings) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
    )


def _parse_arguments(raw: Optional[str]) -> Optional[dict]:
    try:
        args = json.loads(raw or "{}")
    except json.JSONDecodeError:
        return None
    return args if isinstance(args, dict) else None


async def _run_tool_calls(tool_calls, rarible: RaribleClient) -> List[dict]:
    messages = []
    for call in tool_calls:
        args = _parse_arguments(call.function.arguments)
        if args is None:
            logger.warning(f"Bad arguments for {call.function.name}: {call.function.arguments!r}")
            result = {"error": f"Invalid JSON arguments for {call.function.name}"}
        else:
            result = (await execute_tool(call.function.name, args, rarible)).to_dict()
        messages.append({
            "role": "tool",
            "tool_call_id": call.id,
            "content": json.dumps(result, ensure_ascii=False, default=str),
        })
    return messages


async def run_chat(message: str, history: Optional[List[ConversationTurn]], settings: Settings,
                   rarible: Optional[RaribleClient] = None) -> str:
    """Answer one chat turn, letting the model call NFT tools along the way."""
    client = _get_client(settings)
    rarible = rarible or RaribleClient.from_settings(settings)
    tools = openai_tools() if settings.enable_tools else []

    messages = [
        {"role": "system", "content": system_prompt(settings)},
        {"role": "user", "content": build_input(message, history)},
    ]

    response = None
    for round_no in range(settings.max_tool_rounds + 1):
        request = {"model": settings.openai_chat_model, "messages": messages}
        # Last round goes without tools so the model has to answer
        if tools and round_no < settings.max_tool_rounds:
            request["tools"] = tools

        response = await client.chat.completions.create(**request)
        choice = response.choices[0].message
        if not choice.tool_calls or round_no == settings.max_tool_rounds:
            break

        logger.info(f"Round {round_no}: model requested {[c.function.name for c in choice.tool_calls]}")
        messages.append(choice.model_dump(exclude_none=True))
        messages.extend(await _run_tool_calls(choice.tool_calls, rarible))

    reply = extract_reply(response.model_dump())
    logger.info(f"Reply: {reply[:200]}")
    return reply
