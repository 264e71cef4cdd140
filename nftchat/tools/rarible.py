"""Rarible API client, error taxonomy and response normalization helpers."""
import logging
import math
from typing import Any, Callable, Dict, Iterable, Optional

import httpx

from ..config import Settings

logger = logging.getLogger(__name__)

WEI_PER_ETH = 10 ** 18
# Prices above this are assumed to be in base units (wei)
BASE_UNIT_THRESHOLD = 1000


class RaribleError(Exception):
    """Base class for marketplace query failures."""


class UpstreamError(RaribleError):
    """Non-2xx response or transport failure talking to Rarible."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NotFoundError(RaribleError):
    """Upstream returned no matching records."""


class ParseError(RaribleError):
    """No usable value survived extraction."""


class RaribleClient:
    """Thin GET-only client for the Rarible multichain API."""

    def __init__(self, api_key: Optional[str] = None,
                 base_url: str = "https://api.rarible.org/v0.1",
                 timeout: float = 15,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RaribleClient":
        return cls(
            api_key=settings.rarible_key,
            base_url=settings.rarible_api_base,
            timeout=settings.rarible_timeout,
            **kwargs,
        )

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return headers

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET an endpoint and return the decoded JSON body."""
        url = f"{self.base_url}{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, params=params, headers=self.headers())
        except httpx.HTTPError as e:
            logger.error(f"Rarible API transport error for {endpoint}: {e}")
            raise UpstreamError(f"Rarible API request failed: {e}") from e

        if resp.is_error:
            logger.error(f"Rarible API error: {resp.status_code} {endpoint} {resp.text[:200]}")
            raise UpstreamError(
                f"Rarible API error: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp.json()


def normalize_id(identifier: str, blockchain: str = "ethereum") -> str:
    """Prefix identifier with the upper-cased chain unless it already has one."""
    if ":" in identifier:
        return identifier
    return f"{blockchain.upper()}:{identifier}"


def item_id(contract: str, token_id: str, blockchain: str = "ethereum") -> str:
    return f"{normalize_id(contract, blockchain)}:{token_id}"


def dig(obj: Any, *path: Any) -> Any:
    """Walk nested dicts/lists, returning None on any missing step."""
    for key in path:
        if isinstance(key, int):
            if not isinstance(obj, list) or len(obj) <= key:
                return None
        elif not isinstance(obj, dict):
            return None
        obj = obj[key] if isinstance(key, int) else obj.get(key)
        if obj is None:
            return None
    return obj


def _present(value: Any) -> bool:
    return value is not None and value != "" and value != [] and value != {}


def first_of(obj: Any, extractors: Iterable[Callable[[Any], Any]], default: Any = None) -> Any:
    """Try extractors in order; first non-empty result wins."""
    for extract in extractors:
        value = extract(obj)
        if _present(value):
            return value
    return default


def pick(obj: Any, *path: Any, default: Any = None) -> Any:
    """Single-path lookup with a sentinel default for missing values."""
    value = dig(obj, *path)
    return value if _present(value) else default


def parse_number(value: Any) -> Optional[float]:
    """Parse a plain number or decimal string; None when not a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


PRICE_EXTRACTORS = [
    lambda price: parse_number(price),
    lambda price: parse_number(price.get("value")) if isinstance(price, dict) else None,
    lambda price: parse_number(price.get("amount")) if isinstance(price, dict) else None,
]


def to_display_units(value: float) -> float:
    if value > BASE_UNIT_THRESHOLD:
        return value / WEI_PER_ETH
    return value


def extract_price(price: Any) -> Optional[float]:
    """Positive display-unit price from any of the known shapes, else None."""
    if not _present(price):
        return None
    value = first_of(price, PRICE_EXTRACTORS)
    if value is None:
        return None
    value = to_display_units(value)
    return value if value > 0 else None


def clamp_size(size: Any, default: int, maximum: int, minimum: int = 1) -> int:
    number = parse_number(size)
    if number is None:
        return default
    return max(minimum, min(int(number), maximum))


def fmt4(value: float) -> str:
    return f"{value:.4f}"
