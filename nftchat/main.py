"""
nftchat HTTP server
FastAPI app: chat page, health check and the chat endpoint
"""
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from .config import Settings, get_settings
from .llm import run_chat
from .protocol import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

app = FastAPI(title="nftchat")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"ok": True}


@app.post("/api/chat")
async def chat(request: Request, settings: Settings = Depends(get_settings)):
    if not settings.openai_api_key:
        return _error(500, "OpenAI API key not configured")

    try:
        try:
            req = ChatRequest.model_validate(await request.json())
        except ValidationError as e:
            return _error(400, f"Invalid request: {e.errors()[0].get('msg', 'bad payload')}")

        if not req.message or not req.message.strip():
            return _error(400, "Message is required")

        history = req.conversation_history or []
        logger.info(f"Chat request: {len(history)} history turns, message={req.message[:80]!r}")
        reply = await run_chat(req.message, history, settings)
        return ChatResponse(message=reply).model_dump()
    except Exception as e:
        logger.error(f"Chat API error: {e}", exc_info=True)
        return _error(500, f"Failed to process chat request: {e}")


@app.get("/", response_class=HTMLResponse)
async def chat_page():
    """Chat web interface"""
    return CHAT_PAGE


CHAT_PAGE = """
<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>NFT Chat</title>
    <style>
      body { font-family: sans-serif; max-width: 760px; margin: 24px auto; padding: 0 16px; }
      #log { border: 1px solid #ddd; border-radius: 8px; padding: 12px; height: 60vh; overflow-y: auto; }
      .msg { margin: 8px 0; white-space: pre-wrap; }
      .user { text-align: right; color: #1d4ed8; }
      .assistant { color: #111; }
      .error { color: #b91c1c; }
      form { display: flex; gap: 8px; margin-top: 12px; }
      input { flex: 1; padding: 8px; }
      button { padding: 8px 16px; }
    </style>
  </head>
  <body>
    <h2>NFT Chat</h2>
    <div id="log"></div>
    <form id="form">
      <input id="input" placeholder="Ask about an NFT collection..." autocomplete="off" />
      <button id="send" type="submit">Send</button>
    </form>
    <script>
      const history = [];
      const log = document.getElementById('log');
      const input = document.getElementById('input');
      const send = document.getElementById('send');

      function add(role, text) {
        const div = document.createElement('div');
        div.className = 'msg ' + role;
        div.textContent = text;
        log.appendChild(div);
        log.scrollTop = log.scrollHeight;
      }

      document.getElementById('form').addEventListener('submit', async (ev) => {
        ev.preventDefault();
        const message = input.value.trim();
        if (!message) return;
        input.value = '';
        add('user', message);
        send.disabled = true;
        try {
          const resp = await fetch('/api/chat', {
            method: 'POST',
            headers: {'Content-Type': 'application/json'},
            body: JSON.stringify({message, conversationHistory: history}),
          });
          const data = await resp.json();
          if (!resp.ok) throw new Error(data.error || resp.statusText);
          add('assistant', data.message);
          history.push({role: 'user', content: message});
          history.push({role: 'assistant', content: data.message});
        } catch (err) {
          add('error', 'Error: ' + err.message);
        } finally {
          send.disabled = false;
          input.focus();
        }
      });
    </script>
  </body>
</html>
"""
