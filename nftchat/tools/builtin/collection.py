"""Collection tools — floor price, stats, activity, items and trending."""
import logging
from typing import Any, Dict, List

from ..registry import register_tool, ToolResult, ToolParam, blockchain_param
from ..rarible import (
    RaribleClient, NotFoundError, ParseError,
    normalize_id, extract_price, parse_number, pick, clamp_size, fmt4,
)

logger = logging.getLogger(__name__)

# No upstream trending endpoint: rank these by recent sales instead
POPULAR_COLLECTIONS = [
    "ETHEREUM:0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d",  # BAYC
    "ETHEREUM:0x60e4d786628fea6478f785a6d7e704777c86a7c6",  # MAYC
    "ETHEREUM:0x8a90cab2b38dba80c64b7734e58ee1db38b8992e",  # Doodles
    "ETHEREUM:0x23581767a106ae21c074b2276d25e5c3e136a68b",  # Moonbirds
    "ETHEREUM:0x49cf6f5d44e70224e2e23fdcdd2c053f30ada28b",  # CloneX
]

FLOOR_SAMPLE_SIZE = 20
ACTIVITY_TYPES = ["SELL", "BID", "MINT", "TRANSFER", "BURN"]
PERIODS = ["1h", "6h", "24h", "7d", "30d"]


async def _recent_sales(client: RaribleClient, collection_id: str, size: int = FLOOR_SAMPLE_SIZE) -> List[dict]:
    data = await client.get(
        "/activities/byCollection",
        params={"type": "SELL", "collection": collection_id, "size": size},
    )
    return data.get("activities") or []


def summarize_prices(raw_prices: List[Any]) -> Dict[str, str]:
    """Floor, average and range over the prices that parse.

    Raises ParseError if none do.
    """
    prices = sorted(p for p in (extract_price(raw) for raw in raw_prices) if p is not None)
    if not prices:
        raise ParseError("no parseable prices")
    return {
        "floor_price": fmt4(prices[0]),
        "average_price": fmt4(sum(prices) / len(prices)),
        "min": fmt4(prices[0]),
        "max": fmt4(prices[-1]),
    }


@register_tool(
    "get_collection_floor_price",
    description="Get the floor price of an NFT collection",
    params=[
        ToolParam("collection", description="The name or contract address of the NFT collection "
                                            "(e.g. 'doodles', 'bored-ape-yacht-club')"),
        blockchain_param(),
    ],
)
async def get_collection_floor_price(collection: str, blockchain: str = "ethereum",
                                     client: RaribleClient = None, **kwargs) -> ToolResult:
    collection_id = normalize_id(collection, blockchain)
    logger.info(f"Floor price for {collection_id}")
    try:
        activities = await _recent_sales(client, collection_id)
        if not activities:
            raise NotFoundError(f"No recent sales found for collection {collection}")

        try:
            summary = summarize_prices([a.get("price") for a in activities])
        except ParseError:
            raise ParseError(
                f"No valid price data found for collection {collection}. "
                f"Found {len(activities)} activities but no parseable prices."
            ) from None

        # Not isolated: if this fails the whole query fails
        items = await client.get("/items/byCollection", params={"collection": collection_id, "size": 5})
    except (NotFoundError, ParseError) as e:
        return ToolResult.fail(str(e))
    except Exception as e:
        logger.error(f"Floor price query failed for {collection_id}: {e}")
        return ToolResult.fail(f"Failed to get floor price for {collection}: {e}")

    return ToolResult.ok({
        "collection": collection,
        "collection_id": collection_id,
        "blockchain": blockchain.upper(),
        "floor_price": summary["floor_price"],
        "average_price": summary["average_price"],
        "currency": "ETH",
        "recent_sales": len(activities),
        "total_items": len(items.get("items") or []),
        "price_range": {"min": summary["min"], "max": summary["max"]},
    })


_STAT_FIELDS = [
    ("floor_price", "floorPrice"),
    ("volume_24h", "volume24h"),
    ("volume_7d", "volume7d"),
    ("volume_30d", "volume30d"),
    ("total_volume", "totalVolume"),
    ("owners", "owners"),
    ("total_supply", "totalSupply"),
    ("average_price", "averagePrice"),
]


@register_tool(
    "get_collection_stats",
    description="Get statistics for an NFT collection including volume, sales, etc.",
    params=[
        ToolParam("collection", description="The contract address or slug of the NFT collection"),
        blockchain_param(),
    ],
)
async def get_collection_stats(collection: str, blockchain: str = "ethereum",
                               client: RaribleClient = None, **kwargs) -> ToolResult:
    collection_id = normalize_id(collection, blockchain)
    try:
        stats = await client.get(f"/collections/{collection_id}/stats")
    except Exception as e:
        logger.error(f"Collection stats failed for {collection_id}: {e}")
        return ToolResult.fail(f"Failed to get collection stats: {e}")

    data = {"collection": collection, "blockchain": blockchain}
    for key, upstream_key in _STAT_FIELDS:
        data[key] = pick(stats, upstream_key, default="Not available")
    return ToolResult.ok(data)


def _format_activity(activity: dict) -> Dict[str, Any]:
    return {
        "id": activity.get("id"),
        "type": activity.get("@type"),
        "date": activity.get("date"),
        "price": activity.get("price"),
        "price_usd": activity.get("priceUsd"),
        "nft": {
            "contract": pick(activity, "nft", "type", "contract"),
            "token_id": pick(activity, "nft", "type", "tokenId"),
        },
        "buyer": activity.get("buyer"),
        "seller": activity.get("seller"),
        "source": activity.get("source"),
    }


@register_tool(
    "get_collection_activities",
    description="Get recent trading activities for an NFT collection",
    params=[
        ToolParam("collection", description="The contract address of the NFT collection"),
        ToolParam("activity_type", description="Type of activity to filter (defaults to SELL)",
                  required=False, enum=ACTIVITY_TYPES, default="SELL"),
        ToolParam("size", type="number", description="Number of activities to return (default: 10, max: 100)",
                  required=False, default=10),
        blockchain_param(),
    ],
)
async def get_collection_activities(collection: str, activity_type: str = "SELL", size: int = 10,
                                    blockchain: str = "ethereum",
                                    client: RaribleClient = None, **kwargs) -> ToolResult:
    collection_id = normalize_id(collection, blockchain)
    try:
        data = await client.get(
            "/activities/byCollection",
            params={"type": activity_type, "collection": collection_id, "size": clamp_size(size, 10, 100)},
        )
    except Exception as e:
        logger.error(f"Activities query failed for {collection_id}: {e}")
        return ToolResult.fail(f"Failed to get activities for {collection}: {e}")

    activities = [_format_activity(a) for a in data.get("activities") or []]
    return ToolResult.ok({
        "collection": collection,
        "activity_type": activity_type,
        "activities": activities,
        "total": len(activities),
        "blockchain": blockchain.upper(),
    })


def _format_item(item: dict) -> Dict[str, Any]:
    order = item.get("bestSellOrder")
    if order:
        best_sell_order = {
            "price": pick(order, "makePrice", default="Not available"),
            "currency": pick(order, "make", "type", "contract", default=""),
        }
    else:
        best_sell_order = "Not listed"
    return {
        "id": item.get("id"),
        "name": pick(item, "meta", "name", default="Unknown"),
        "description": pick(item, "meta", "description", default=""),
        "image": pick(item, "meta", "image", default=""),
        "token_id": item.get("tokenId"),
        "supply": item.get("supply"),
        "owners": item.get("owners") or [],
        "best_sell_order": best_sell_order,
    }


@register_tool(
    "get_collection_items",
    description="Get items/NFTs from a specific collection",
    params=[
        ToolParam("collection", description="The contract address of the NFT collection"),
        ToolParam("size", type="number", description="Number of items to return (default: 20, max: 100)",
                  required=False, default=20),
        blockchain_param(),
    ],
)
async def get_collection_items(collection: str, size: int = 20, blockchain: str = "ethereum",
                               client: RaribleClient = None, **kwargs) -> ToolResult:
    collection_id = normalize_id(collection, blockchain)
    try:
        data = await client.get(
            "/items/byCollection",
            params={"collection": collection_id, "size": clamp_size(size, 20, 100)},
        )
    except Exception as e:
        logger.error(f"Collection items failed for {collection_id}: {e}")
        return ToolResult.fail(f"Failed to get collection items: {e}")

    items = [_format_item(i) for i in data.get("items") or []]
    return ToolResult.ok({
        "collection": collection,
        "blockchain": blockchain.upper(),
        "items": items,
        "total": len(items),
    })


def _collection_volume(collection_id: str, activities: List[dict]) -> Dict[str, Any]:
    prices = [p for p in (parse_number(a.get("price")) for a in activities if a.get("price")) if p is not None]
    volumes = [v for v in (parse_number(a.get("priceUsd")) for a in activities if a.get("priceUsd")) if v is not None]
    floor = min(prices) if prices else 0
    return {
        "collection": collection_id,
        "name": collection_id.split(":")[1][:10] + "...",
        "volume_24h": sum(volumes),
        "sales": len(activities),
        "floor_price": fmt4(floor) if floor > 0 else "Not available",
        "currency": "ETH",
    }


@register_tool(
    "get_trending_collections",
    description="Get trending NFT collections by volume or activity",
    params=[
        ToolParam("period", description="Time period for trending analysis (defaults to 24h)",
                  required=False, enum=PERIODS, default="24h"),
        ToolParam("size", type="number", description="Number of collections to return (default: 10, max: 50)",
                  required=False, default=10),
        blockchain_param(),
    ],
)
async def get_trending_collections(period: str = "24h", size: int = 10, blockchain: str = "ethereum",
                                   client: RaribleClient = None, **kwargs) -> ToolResult:
    stats = []
    for collection_id in POPULAR_COLLECTIONS[:clamp_size(size, 10, 50, minimum=0)]:
        try:
            activities = await _recent_sales(client, collection_id)
            if activities:
                stats.append(_collection_volume(collection_id, activities))
        except Exception as e:
            logger.warning(f"Trending: skipping {collection_id}: {e}")

    # sorted() is stable, so equal volumes keep list order
    stats = sorted(stats, key=lambda s: s["volume_24h"], reverse=True)
    return ToolResult.ok({
        "period": period,
        "blockchain": blockchain.upper(),
        "collections": stats,
        "total": len(stats),
        "note": "Based on recent activity from popular collections",
    })
