"""Single-NFT tools — metadata, ownership, orders, plus item search."""
import logging
from typing import Any, Dict

from ..registry import register_tool, ToolResult, ToolParam, blockchain_param
from ..rarible import RaribleClient, normalize_id, item_id, dig, first_of, pick, clamp_size

logger = logging.getLogger(__name__)

ORDER_TYPES = ["SELL", "BID"]

# Older payloads carry meta.image, current ones a meta.content list
IMAGE_EXTRACTORS = [
    lambda item: dig(item, "meta", "image"),
    lambda item: dig(item, "meta", "content", 0, "url"),
]

LISTING_PRICE_EXTRACTORS = [
    lambda item: dig(item, "bestSellOrder", "price"),
    lambda item: dig(item, "bestSellOrder", "makePrice"),
]

_CONTRACT_PARAM = ToolParam("contract", description="The contract address of the NFT")
_TOKEN_PARAM = ToolParam("token_id", description="The token ID of the NFT")


@register_tool(
    "get_nft_info",
    description="Get detailed information about a specific NFT",
    params=[_CONTRACT_PARAM, _TOKEN_PARAM, blockchain_param()],
)
async def get_nft_info(contract: str, token_id: str, blockchain: str = "ethereum",
                       client: RaribleClient = None, **kwargs) -> ToolResult:
    nft_id = item_id(contract, token_id, blockchain)
    try:
        nft = await client.get(f"/items/{nft_id}")
    except Exception as e:
        logger.error(f"NFT info failed for {nft_id}: {e}")
        return ToolResult.fail(f"Failed to get NFT info: {e}")

    return ToolResult.ok({
        "id": pick(nft, "id", default=nft_id),
        "name": pick(nft, "meta", "name", default="Unknown"),
        "description": pick(nft, "meta", "description", default=""),
        "image": first_of(nft, IMAGE_EXTRACTORS, default=""),
        "owner": pick(nft, "owners", 0, default="Unknown"),
        "creator": pick(nft, "creators", 0, "account", default="Unknown"),
        "last_price": pick(nft, "lastSale", "price", default="Not sold"),
        "currency": pick(nft, "lastSale", "currency", default=""),
        "blockchain": blockchain,
    })


@register_tool(
    "get_nft_ownership",
    description="Get ownership information for a specific NFT",
    params=[_CONTRACT_PARAM, _TOKEN_PARAM, blockchain_param()],
)
async def get_nft_ownership(contract: str, token_id: str, blockchain: str = "ethereum",
                            client: RaribleClient = None, **kwargs) -> ToolResult:
    nft_id = item_id(contract, token_id, blockchain)
    try:
        nft = await client.get(f"/items/{nft_id}")
    except Exception as e:
        logger.error(f"NFT ownership failed for {nft_id}: {e}")
        return ToolResult.fail(f"Failed to get ownership info: {e}")

    return ToolResult.ok({
        "contract": contract,
        "token_id": token_id,
        "blockchain": blockchain.upper(),
        "owners": pick(nft, "owners", default=[]),
        "supply": pick(nft, "supply", default="1"),
        "lazy_supply": pick(nft, "lazySupply", default="0"),
        "creators": pick(nft, "creators", default=[]),
        "royalties": pick(nft, "royalties", default=[]),
    })


def _side_matches(order: dict, side: str, contract: str, contract_id: str) -> bool:
    asset_contract = dig(order, side, "type", "contract")
    if not isinstance(asset_contract, str):
        return False
    return asset_contract.lower() in (contract.lower(), contract_id.lower())


def _format_order(order: dict) -> Dict[str, Any]:
    return {
        "id": order.get("id"),
        "type": order.get("type"),
        "maker": order.get("maker"),
        "price": order.get("makePrice") or order.get("takePrice"),
        "currency": dig(order, "make", "type", "contract") or dig(order, "take", "type", "contract"),
        "started_at": order.get("startedAt"),
        "ended_at": order.get("endedAt"),
        "status": order.get("status"),
    }


@register_tool(
    "get_nft_orders",
    description="Get current buy/sell orders for a specific NFT",
    params=[
        _CONTRACT_PARAM,
        _TOKEN_PARAM,
        ToolParam("order_type", description="Type of orders to retrieve (defaults to SELL)",
                  required=False, enum=ORDER_TYPES, default="SELL"),
        blockchain_param(),
    ],
)
async def get_nft_orders(contract: str, token_id: str, order_type: str = "SELL", blockchain: str = "ethereum",
                         client: RaribleClient = None, **kwargs) -> ToolResult:
    nft_id = item_id(contract, token_id, blockchain)
    try:
        data = await client.get("/orders/byItem", params={"itemId": nft_id, "size": 20})
    except Exception as e:
        logger.error(f"NFT orders failed for {nft_id}: {e}")
        return ToolResult.fail(f"Failed to get NFT orders: {e}")

    # A sell order offers the NFT on its make side, a bid asks for it on the take side
    side = "make" if order_type == "SELL" else "take"
    contract_id = normalize_id(contract, blockchain)
    orders = [
        _format_order(o) for o in data.get("orders") or []
        if _side_matches(o, side, contract, contract_id)
    ]
    return ToolResult.ok({
        "contract": contract,
        "token_id": token_id,
        "order_type": order_type,
        "blockchain": blockchain.upper(),
        "orders": orders,
        "total": len(orders),
    })


@register_tool(
    "search_nfts",
    description="Search for NFTs by name, collection, or other criteria",
    params=[
        ToolParam("query", description="Search query (collection name, NFT name, etc.)"),
        ToolParam("size", type="number", description="Number of results to return (default: 10, max: 50)",
                  required=False, default=10),
        blockchain_param(),
    ],
)
async def search_nfts(query: str, size: int = 10, blockchain: str = "ethereum",
                      client: RaribleClient = None, **kwargs) -> ToolResult:
    try:
        data = await client.get(
            "/items/search",
            params={"text": query, "size": clamp_size(size, 10, 50), "blockchain": blockchain.upper()},
        )
    except Exception as e:
        logger.error(f"NFT search failed for {query!r}: {e}")
        return ToolResult.fail(f"Failed to search NFTs: {e}")

    results = [
        {
            "id": item.get("id"),
            "name": pick(item, "meta", "name", default="Unknown"),
            "collection": pick(item, "collection", default="Unknown"),
            "price": first_of(item, LISTING_PRICE_EXTRACTORS, default="Not listed"),
            "currency": pick(item, "bestSellOrder", "currency", default=""),
            "image": first_of(item, IMAGE_EXTRACTORS, default=""),
        }
        for item in data.get("items") or []
    ]
    return ToolResult.ok({
        "query": query,
        "results": results,
        "total": pick(data, "total", default=0),
        "blockchain": blockchain,
    })
