"""Wallet tools — NFTs held by an owner address."""
import logging

from ..registry import register_tool, ToolResult, ToolParam, blockchain_param
from ..rarible import RaribleClient, normalize_id, pick, clamp_size

logger = logging.getLogger(__name__)


@register_tool(
    "get_user_nfts",
    description="Get NFTs owned by a specific wallet address",
    params=[
        ToolParam("owner", description="The wallet address of the NFT owner"),
        ToolParam("size", type="number", description="Number of NFTs to return (default: 20, max: 100)",
                  required=False, default=20),
        blockchain_param(),
    ],
)
async def get_user_nfts(owner: str, size: int = 20, blockchain: str = "ethereum",
                        client: RaribleClient = None, **kwargs) -> ToolResult:
    owner_id = normalize_id(owner, blockchain)
    try:
        data = await client.get("/items/byOwner", params={"owner": owner_id, "size": clamp_size(size, 20, 100)})
    except Exception as e:
        logger.error(f"Owner items failed for {owner_id}: {e}")
        return ToolResult.fail(f"Failed to get NFTs for owner: {e}")

    items = [
        {
            "id": item.get("id"),
            "name": pick(item, "meta", "name", default="Unknown"),
            "description": pick(item, "meta", "description", default=""),
            "image": pick(item, "meta", "image", default=""),
            "collection": pick(item, "collection", default="Unknown"),
            "supply": item.get("supply"),
            "last_price": pick(item, "lastSale", "price", default="Not sold"),
        }
        for item in data.get("items") or []
    ]
    return ToolResult.ok({
        "owner": owner,
        "blockchain": blockchain.upper(),
        "items": items,
        "total": len(items),
    })
