from pydantic import BaseModel
import os
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Load .env file if it exists (before reading os.getenv)
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    with open(_env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                # Only set if not already in environment (env vars take precedence)
                if key not in os.environ:
                    os.environ[key] = value

RARIBLE_KEY_PLACEHOLDER = "your_rarible_api_key_here"


def _sanitize_ascii(val: str) -> str:
    """Strip non-ASCII characters from config values (prevents encoding errors)"""
    return val.encode('ascii', errors='ignore').decode('ascii').strip()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def mask_key(key: str) -> str:
    return '***' + key[-4:] if len(key) > 4 else 'EMPTY'


class Settings(BaseModel):
    # Network
    host: str = os.getenv("NFTCHAT_HOST", "0.0.0.0")
    port: int = int(os.getenv("NFTCHAT_PORT", "8000"))

    # OpenAI chat provider
    openai_api_key: str = _sanitize_ascii(os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = _sanitize_ascii(os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"))
    openai_chat_model: str = _sanitize_ascii(os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini"))

    # Tool calling
    enable_tools: bool = _env_flag("NFTCHAT_ENABLE_TOOLS", "true")
    max_tool_rounds: int = int(os.getenv("NFTCHAT_MAX_TOOL_ROUNDS", "5"))

    # Rarible marketplace API (key optional, placeholder counts as unset)
    rarible_api_key: str = _sanitize_ascii(os.getenv("RARIBLE_API_KEY", ""))
    rarible_api_base: str = _sanitize_ascii(os.getenv("RARIBLE_API_BASE", "https://api.rarible.org/v0.1"))
    rarible_timeout: float = float(os.getenv("RARIBLE_TIMEOUT", "15"))

    @property
    def rarible_key(self) -> Optional[str]:
        """Configured Rarible key, or None when unset or left at the placeholder."""
        if not self.rarible_api_key or self.rarible_api_key == RARIBLE_KEY_PLACEHOLDER:
            return None
        return self.rarible_api_key


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return settings


# Log config for debugging
logger.info(f"Config: chat → {settings.openai_base_url} (key={mask_key(settings.openai_api_key)}), "
            f"model={settings.openai_chat_model}")
logger.info(f"Config: Rarible → {settings.rarible_api_base} "
            f"(key={'set' if settings.rarible_key else 'not configured'})")
