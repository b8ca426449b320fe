"""Tests for the chain JSON-RPC client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from typing import Any

import httpx
from eth_account import Account

from src.helpers.models import ChainBlock, ChainReceipt, ChainTransaction
from src.helpers.rpc import ChainClient


def rpc_http_client(*results: Any) -> AsyncMock:
    """HTTP client mock answering successive posts with the given results."""
    mock_http_client = AsyncMock(spec=httpx.AsyncClient)
    responses = []
    for result in results:
        mock_response = MagicMock()
        mock_response.json.return_value = {"jsonrpc": "2.0", "id": 1, "result": result}
        responses.append(mock_response)
    mock_http_client.post.side_effect = responses
    return mock_http_client


BLOCK = {
    "number": "0x30d",
    "hash": "0xabc",
    "parentHash": "0xabb",
    "miner": "0x0000000000000000000000000000000000000001",
    "timestamp": "0x624e4b6b",
    "gasLimit": "0x1c9c380",
    "gasUsed": "0x5208",
    "transactions": ["0x01", "0x02"],
}

TRANSACTION = {
    "hash": "0xfeed",
    "nonce": "0x2",
    "from": "0x0000000000000000000000000000000000000002",
    "to": "0x0000000000000000000000000000000000000003",
    "value": "0xde0b6b3a7640000",
    "gas": "0x5208",
    "gasPrice": "0x2540be400",
    "blockNumber": "0x30d",
}


class TestChainClient:
    """Tests for ChainClient class."""

    def test_init_with_valid_url(self) -> None:
        """Test ChainClient initialization with valid URL."""
        client = ChainClient("http://node0:8545")

        assert client.rpc_url == "http://node0:8545"
        assert client.timeout == 30.0

    def test_init_with_empty_url_raises(self) -> None:
        """Test that empty URL raises ValueError."""
        with pytest.raises(ValueError, match="RPC URL cannot be empty"):
            ChainClient("")

    @pytest.mark.asyncio
    async def test_call_sends_json_rpc_payload(self) -> None:
        """Test the request body of a single call."""
        client = ChainClient("http://node0:8545", timeout=30.0)
        mock_http_client = rpc_http_client("0x1000")

        result = await client.call(mock_http_client, "eth_blockNumber", timeout=60.0)

        assert result == "0x1000"
        mock_http_client.post.assert_called_once_with(
            "http://node0:8545",
            json={"jsonrpc": "2.0", "method": "eth_blockNumber", "params": [], "id": 1},
            timeout=60.0,
        )

    @pytest.mark.asyncio
    async def test_call_rpc_error_raises(self) -> None:
        """Test that an RPC error response raises ValueError without retry."""
        client = ChainClient("http://node0:8545")
        mock_http_client = AsyncMock(spec=httpx.AsyncClient)
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32601, "message": "Method not found"},
        }
        mock_http_client.post.return_value = mock_response

        with pytest.raises(ValueError, match="RPC error"):
            await client.call(mock_http_client, "eth_unknown")

        mock_http_client.post.assert_called_once()

    @pytest.mark.asyncio
    async def test_call_retries_transport_errors(self) -> None:
        """Test that a timeout is retried before the call succeeds."""
        client = ChainClient("http://node0:8545")
        mock_http_client = AsyncMock(spec=httpx.AsyncClient)
        mock_response = MagicMock()
        mock_response.json.return_value = {"jsonrpc": "2.0", "id": 1, "result": "0x1"}
        mock_http_client.post.side_effect = [
            httpx.ReadTimeout("timed out"),
            mock_response,
        ]

        with patch("src.helpers.http.sleep", new_callable=AsyncMock):
            result = await client.call(mock_http_client, "eth_blockNumber")

        assert result == "0x1"
        assert mock_http_client.post.call_count == 2

    @pytest.mark.asyncio
    async def test_get_balance(self) -> None:
        """Test balance lookup at the latest block."""
        client = ChainClient("http://node0:8545")
        mock_http_client = rpc_http_client("0xde0b6b3a7640000")

        balance = await client.get_balance(mock_http_client, "0xabc")

        assert balance == 10**18
        payload = mock_http_client.post.call_args.kwargs["json"]
        assert payload["params"] == ["0xabc", "latest"]

    @pytest.mark.asyncio
    async def test_get_balance_at_height(self) -> None:
        """Test that an integer height is sent as hex."""
        client = ChainClient("http://node0:8545")
        mock_http_client = rpc_http_client("0x0")

        balance = await client.get_balance(mock_http_client, "0xabc", 255)

        assert balance == 0
        payload = mock_http_client.post.call_args.kwargs["json"]
        assert payload["params"] == ["0xabc", "0xff"]

    @pytest.mark.asyncio
    async def test_get_transaction(self) -> None:
        """Test that a known transaction is parsed."""
        client = ChainClient("http://node0:8545")

        tx = await client.get_transaction(rpc_http_client(TRANSACTION), "0xfeed")

        assert isinstance(tx, ChainTransaction)
        assert tx.from_address == TRANSACTION["from"]
        assert tx.block_number == "0x30d"

    @pytest.mark.asyncio
    async def test_get_transaction_unknown(self) -> None:
        """Test that an unknown hash gives None."""
        client = ChainClient("http://node0:8545")

        assert await client.get_transaction(rpc_http_client(None), "0xdead") is None

    @pytest.mark.asyncio
    async def test_get_block(self) -> None:
        """Test that a block is fetched without full transactions."""
        client = ChainClient("http://node0:8545")
        mock_http_client = rpc_http_client(BLOCK)

        block = await client.get_block(mock_http_client, 781)

        assert isinstance(block, ChainBlock)
        assert block.parent_hash == "0xabb"
        assert block.transactions == ["0x01", "0x02"]
        payload = mock_http_client.post.call_args.kwargs["json"]
        assert payload["method"] == "eth_getBlockByNumber"
        assert payload["params"] == ["0x30d", False]

    @pytest.mark.asyncio
    async def test_get_block_past_head(self) -> None:
        """Test that a block past the chain head gives None."""
        client = ChainClient("http://node0:8545")

        assert await client.get_block(rpc_http_client(None), 10**9) is None

    @pytest.mark.asyncio
    async def test_get_block_number(self) -> None:
        """Test getting the latest block number."""
        client = ChainClient("http://node0:8545")

        assert await client.get_block_number(rpc_http_client("0x30d")) == 781

    @pytest.mark.asyncio
    async def test_get_chain_id_and_gas_price(self) -> None:
        """Test the chain id and gas price lookups."""
        client = ChainClient("http://node0:8545")
        mock_http_client = rpc_http_client("0x868", "0x2540be400")

        assert await client.get_chain_id(mock_http_client) == 2152
        assert await client.get_gas_price(mock_http_client) == 10**10
        methods = [
            call.kwargs["json"]["method"] for call in mock_http_client.post.call_args_list
        ]
        assert methods == ["eth_chainId", "eth_gasPrice"]

    @pytest.mark.asyncio
    async def test_get_transaction_count_defaults_to_pending(self) -> None:
        """Test that the nonce includes pending transactions."""
        client = ChainClient("http://node0:8545")
        mock_http_client = rpc_http_client("0x7")

        assert await client.get_transaction_count(mock_http_client, "0xabc") == 7
        payload = mock_http_client.post.call_args.kwargs["json"]
        assert payload["params"] == ["0xabc", "pending"]

    @pytest.mark.asyncio
    async def test_get_transaction_receipt(self) -> None:
        """Test that receipts are parsed and a missing one gives None."""
        client = ChainClient("http://node0:8545")
        mock_http_client = rpc_http_client(
            {"transactionHash": "0xfeed", "blockNumber": "0x30d", "status": "0x0"},
            None,
        )

        receipt = await client.get_transaction_receipt(mock_http_client, "0xfeed")
        pending = await client.get_transaction_receipt(mock_http_client, "0xbeef")

        assert isinstance(receipt, ChainReceipt)
        assert receipt.block_number == "0x30d"
        assert receipt.succeeded is False
        assert pending is None

    @pytest.mark.asyncio
    async def test_transfer_sends_signed_transaction(self) -> None:
        """Test that a transfer is signed by the sender and sent raw."""
        client = ChainClient("http://node0:8545")
        sender = Account.from_key("0x" + "11" * 32)
        recipient = Account.from_key("0x" + "22" * 32).address
        mock_http_client = rpc_http_client("0xfeed")

        tx_hash = await client.transfer(
            mock_http_client,
            sender,
            recipient,
            10**17,
            nonce=3,
            gas_price=10**10,
            chain_id=2152,
        )

        assert tx_hash == "0xfeed"
        payload = mock_http_client.post.call_args.kwargs["json"]
        assert payload["method"] == "eth_sendRawTransaction"
        raw = payload["params"][0]
        assert Account.recover_transaction(raw) == sender.address
        expected = sender.sign_transaction(
            {
                "to": recipient,
                "value": 10**17,
                "gas": 21_000,
                "gasPrice": 10**10,
                "nonce": 3,
                "chainId": 2152,
            }
        )
        assert raw == f"0x{bytes(expected.raw_transaction).hex()}"
