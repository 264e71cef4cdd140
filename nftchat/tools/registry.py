"""Tool registry — decorator-based tool registration and lookup."""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Awaitable, Dict, List, Optional

logger = logging.getLogger(__name__)

BLOCKCHAINS = ["ethereum", "polygon", "flow", "tezos"]


@dataclass
class ToolParam:
    name: str
    type: str = "string"
    description: str = ""
    required: bool = True
    enum: Optional[List[str]] = None
    default: Any = None

    def schema(self) -> Dict[str, Any]:
        prop: Dict[str, Any] = {"type": self.type}
        if self.enum:
            prop["enum"] = list(self.enum)
        if self.default is not None:
            prop["default"] = self.default
        if self.description:
            prop["description"] = self.description
        return prop


def blockchain_param() -> ToolParam:
    return ToolParam(
        "blockchain",
        description="The blockchain network (defaults to ethereum)",
        required=False,
        enum=BLOCKCHAINS,
        default="ethereum",
    )


@dataclass(frozen=True)
class ToolResult:
    """Either data or error, never both."""
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def __post_init__(self):
        if (self.data is None) == (self.error is None):
            raise ValueError("ToolResult needs exactly one of data or error")

    @classmethod
    def ok(cls, data: Dict[str, Any]) -> "ToolResult":
        return cls(data=data)

    @classmethod
    def fail(cls, message: str) -> "ToolResult":
        return cls(error=message)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {"data": self.data}


@dataclass
class ToolDef:
    name: str
    description: str
    params: List[ToolParam]
    handler: Callable[..., Awaitable[ToolResult]]

    @property
    def parameters(self) -> Dict[str, Any]:
        """JSON schema for the tool's parameters."""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.schema() for p in self.params},
        }
        required = [p.name for p in self.params if p.required]
        if required:
            schema["required"] = required
        return schema


_tools: Dict[str, ToolDef] = {}


def register_tool(
    name: str,
    description: str = "",
    params: Optional[List[ToolParam]] = None,
):
    """Decorator to register a tool function."""
    def decorator(func):
        if name in _tools:
            raise ValueError(f"Tool already registered: {name}")
        tool = ToolDef(
            name=name,
            description=description or func.__doc__ or "",
            params=params or [],
            handler=func,
        )
        _tools[name] = tool
        logger.info(f"Registered tool: {name}")
        return func
    return decorator


def get_tool(name: str) -> Optional[ToolDef]:
    return _tools.get(name)


def all_tools() -> List[ToolDef]:
    """Registered tools in registration order."""
    return list(_tools.values())


def openai_tools() -> List[Dict[str, Any]]:
    """Registry in OpenAI function-calling format."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            },
        }
        for tool in _tools.values()
    ]


def tool_descriptions_for_llm() -> str:
    """Generate tool list for LLM system prompt."""
    lines = []
    for tool in _tools.values():
        params = []
        for p in tool.params:
            req = "required" if p.required else "optional"
            params.append(f"{p.name}({req}): {p.description}")
        params_text = ", ".join(params) if params else "none"
        lines.append(f"- {tool.name}: {tool.description} | params: {params_text}")
    return "\n".join(lines)
