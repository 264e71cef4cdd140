"""Tests for builtin item and wallet tools — info, ownership, orders, search, owner NFTs."""
import httpx
import pytest

from nftchat.tools.builtin.item import get_nft_info, get_nft_ownership, get_nft_orders, search_nfts
from nftchat.tools.builtin.wallet import get_user_nfts

ITEM_PATH = "/items/ETHEREUM:0xabc:42"


class TestNftInfo:
    @pytest.mark.asyncio
    async def test_full_item(self, rarible):
        client = rarible({ITEM_PATH: {
            "id": "ETHEREUM:0xabc:42",
            "meta": {"name": "Ape #42", "description": "an ape", "image": "ipfs://img"},
            "owners": ["ETHEREUM:0xowner"],
            "creators": [{"account": "ETHEREUM:0xcreator", "value": 10000}],
            "lastSale": {"price": "12.5", "currency": {"@type": "ETH"}},
        }})
        result = await get_nft_info("0xabc", "42", client=client)
        data = result.data
        assert data["name"] == "Ape #42"
        assert data["image"] == "ipfs://img"
        assert data["owner"] == "ETHEREUM:0xowner"
        assert data["creator"] == "ETHEREUM:0xcreator"
        assert data["last_price"] == "12.5"
        assert data["blockchain"] == "ethereum"

    @pytest.mark.asyncio
    async def test_sparse_item_gets_sentinels(self, rarible):
        client = rarible({ITEM_PATH: {"meta": {"content": [{"url": "https://img/1.png"}]}}})
        data = (await get_nft_info("0xabc", "42", client=client)).data
        assert data["id"] == "ETHEREUM:0xabc:42"
        assert data["name"] == "Unknown"
        assert data["description"] == ""
        assert data["image"] == "https://img/1.png"
        assert data["owner"] == "Unknown"
        assert data["creator"] == "Unknown"
        assert data["last_price"] == "Not sold"
        assert data["currency"] == ""

    @pytest.mark.asyncio
    async def test_not_found(self, rarible):
        result = await get_nft_info("0xabc", "999", client=rarible({}))
        assert result.error.startswith("Failed to get NFT info")
        assert "404" in result.error


class TestNftOwnership:
    @pytest.mark.asyncio
    async def test_defaults(self, rarible):
        client = rarible({"/items/POLYGON:0xabc:42": {}})
        data = (await get_nft_ownership("0xabc", "42", blockchain="polygon", client=client)).data
        assert data["blockchain"] == "POLYGON"
        assert data["owners"] == []
        assert data["supply"] == "1"
        assert data["lazy_supply"] == "0"
        assert data["creators"] == []
        assert data["royalties"] == []

    @pytest.mark.asyncio
    async def test_values(self, rarible):
        client = rarible({ITEM_PATH: {"owners": ["a", "b"], "supply": "10", "royalties": [{"value": 500}]}})
        data = (await get_nft_ownership("0xabc", "42", client=client)).data
        assert data["owners"] == ["a", "b"]
        assert data["supply"] == "10"
        assert data["royalties"] == [{"value": 500}]


def _order(order_id, make_contract, take_contract, **extra):
    return {
        "id": order_id,
        "make": {"type": {"contract": make_contract}},
        "take": {"type": {"contract": take_contract}},
        **extra,
    }


ORDERS = {"orders": [
    _order("sell-1", "ETHEREUM:0xabc", "ETHEREUM:0xweth", makePrice="3.1", status="ACTIVE"),
    _order("bid-1", "ETHEREUM:0xweth", "ETHEREUM:0xabc", takePrice="2.9"),
    _order("other", "ETHEREUM:0xzzz", "ETHEREUM:0xweth"),
]}


class TestNftOrders:
    @pytest.mark.asyncio
    async def test_sell_orders_match_make_side(self, rarible, calls):
        client = rarible({"/orders/byItem": ORDERS})
        data = (await get_nft_orders("0xabc", "42", client=client)).data
        assert [o["id"] for o in data["orders"]] == ["sell-1"]
        assert data["orders"][0]["price"] == "3.1"
        assert data["orders"][0]["status"] == "ACTIVE"
        assert data["total"] == 1
        assert calls[0].url.params["itemId"] == "ETHEREUM:0xabc:42"
        assert calls[0].url.params["size"] == "20"

    @pytest.mark.asyncio
    async def test_bid_orders_match_take_side(self, rarible):
        client = rarible({"/orders/byItem": ORDERS})
        data = (await get_nft_orders("0xabc", "42", order_type="BID", client=client)).data
        assert [o["id"] for o in data["orders"]] == ["bid-1"]
        assert data["orders"][0]["price"] == "2.9"
        assert data["orders"][0]["currency"] == "ETHEREUM:0xweth"

    @pytest.mark.asyncio
    async def test_raw_contract_match(self, rarible):
        client = rarible({"/orders/byItem": {"orders": [_order("sell-2", "0xABC", "x")]}})
        data = (await get_nft_orders("0xabc", "42", client=client)).data
        assert [o["id"] for o in data["orders"]] == ["sell-2"]

    @pytest.mark.asyncio
    async def test_no_orders(self, rarible):
        data = (await get_nft_orders("0xabc", "42", client=rarible({"/orders/byItem": {}}))).data
        assert data["orders"] == []
        assert data["total"] == 0


class TestSearchNfts:
    @pytest.mark.asyncio
    async def test_results(self, rarible, calls):
        client = rarible({"/items/search": {"total": 2, "items": [
            {"id": "i1", "meta": {"name": "Doodle #1"}, "collection": "ETHEREUM:0xd",
             "bestSellOrder": {"makePrice": "4.2", "currency": "ETH"}},
            {"id": "i2"},
        ]}})
        data = (await search_nfts("doodle", size=99, client=client)).data
        first, second = data["results"]
        assert first["price"] == "4.2"
        assert first["currency"] == "ETH"
        assert second["name"] == "Unknown"
        assert second["collection"] == "Unknown"
        assert second["price"] == "Not listed"
        assert data["total"] == 2
        assert calls[0].url.params["text"] == "doodle"
        assert calls[0].url.params["size"] == "50"
        assert calls[0].url.params["blockchain"] == "ETHEREUM"

    @pytest.mark.asyncio
    async def test_upstream_failure(self, rarible):
        client = rarible({"/items/search": httpx.Response(429, text="slow down")})
        result = await search_nfts("doodle", client=client)
        assert result.error.startswith("Failed to search NFTs")
        assert "429" in result.error


class TestUserNfts:
    @pytest.mark.asyncio
    async def test_owner_items(self, rarible, calls):
        client = rarible({"/items/byOwner": {"items": [
            {"id": "i1", "meta": {"name": "Punk"}, "collection": "ETHEREUM:0xp", "lastSale": {"price": "70"}},
            {"id": "i2", "supply": "1"},
        ]}})
        data = (await get_user_nfts("0xwallet", size=3, client=client)).data
        assert data["owner"] == "0xwallet"
        assert data["total"] == 2
        assert data["items"][0]["last_price"] == "70"
        assert data["items"][1]["name"] == "Unknown"
        assert data["items"][1]["last_price"] == "Not sold"
        assert calls[0].url.params["owner"] == "ETHEREUM:0xwallet"
        assert calls[0].url.params["size"] == "3"

    @pytest.mark.asyncio
    async def test_failure(self, rarible):
        result = await get_user_nfts("0xwallet", client=rarible({"/items/byOwner": httpx.Response(500)}))
        assert "500" in result.error


class TestSearchListingPrice:
    @pytest.mark.asyncio
    async def test_price_preferred_over_make_price(self, rarible):
        client = rarible({"/items/search": {"items": [
            {"id": "i1", "bestSellOrder": {"price": "1.1", "makePrice": "9.9"}},
            {"id": "i2", "bestSellOrder": {"makePrice": "2.2"}},
        ]}})
        results = (await search_nfts("x", client=client)).data["results"]
        assert [r["price"] for r in results] == ["1.1", "2.2"]
