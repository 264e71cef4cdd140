from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class ConversationTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: Optional[str] = None
    conversation_history: Optional[List[ConversationTurn]] = Field(default=None, alias="conversationHistory")

    model_config = {"populate_by_name": True}


class ChatResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
