"""Ethereum-compatible JSON-RPC client used by the chain commands."""

from typing import TYPE_CHECKING, Any

from src.helpers.constants import TRANSFER_GAS
from src.helpers.http import retry_with_backoff
from src.helpers.models import ChainBlock, ChainReceipt, ChainTransaction
from src.helpers.parsers import parse_hex_int, to_block_param


if TYPE_CHECKING:
    import httpx
    from eth_account.signers.local import LocalAccount


class ChainClient:
    """JSON-RPC client for the account, transaction, block and funding calls."""

    def __init__(self, rpc_url: str, timeout: float = 30.0) -> None:
        """Initialize chain client.

        Args:
            rpc_url: JSON-RPC endpoint URL of a full node
            timeout: Default timeout for requests in seconds

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout

    @retry_with_backoff(max_retries=3)
    async def call(
        self,
        client: "httpx.AsyncClient",
        method: str,
        params: list[Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a single JSON-RPC call.

        Args:
            client: HTTP client instance
            method: RPC method name (e.g., "eth_blockNumber")
            params: Method parameters list
            timeout: Optional timeout override

        Returns:
            RPC result value

        Raises:
            httpx.HTTPError: If the HTTP request keeps failing
            ValueError: If the RPC response contains an error
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": 1,
        }

        response = await client.post(
            self.rpc_url, json=payload, timeout=timeout or self.timeout
        )
        response.raise_for_status()
        result = response.json()

        if "error" in result:
            msg = f"RPC error: {result['error']}"
            raise ValueError(msg)

        return result.get("result")

    async def get_balance(
        self,
        client: "httpx.AsyncClient",
        address: str,
        block_number: int | str = "latest",
    ) -> int:
        """Get the balance of an address.

        Args:
            client: HTTP client instance
            address: Account address
            block_number: Block number (int) or "latest"

        Returns:
            Balance in wei
        """
        result = await self.call(
            client, "eth_getBalance", [address, to_block_param(block_number)]
        )
        return parse_hex_int(result) if result else 0

    async def get_transaction(
        self, client: "httpx.AsyncClient", tx_hash: str
    ) -> ChainTransaction | None:
        """Fetch a transaction by hash.

        Returns:
            The transaction, or None if the node does not know it
        """
        result = await self.call(client, "eth_getTransactionByHash", [tx_hash])
        return ChainTransaction.model_validate(result) if result else None

    async def get_block(
        self, client: "httpx.AsyncClient", block_number: int | str
    ) -> ChainBlock | None:
        """Fetch a block by height, with transaction hashes only.

        Returns:
            The block, or None past the chain head
        """
        result = await self.call(
            client, "eth_getBlockByNumber", [to_block_param(block_number), False]
        )
        return ChainBlock.model_validate(result) if result else None

    async def get_block_number(self, client: "httpx.AsyncClient") -> int:
        """Get the latest block number.

        Args:
            client: HTTP client instance

        Returns:
            Latest block number
        """
        result = await self.call(client, "eth_blockNumber", [])
        return parse_hex_int(result) if result else 0

    async def get_chain_id(self, client: "httpx.AsyncClient") -> int:
        """Get the chain id transactions must be signed for."""
        return parse_hex_int(await self.call(client, "eth_chainId", []))

    async def get_gas_price(self, client: "httpx.AsyncClient") -> int:
        """Get the node's current gas price in wei."""
        return parse_hex_int(await self.call(client, "eth_gasPrice", []))

    async def get_transaction_count(
        self,
        client: "httpx.AsyncClient",
        address: str,
        block_number: int | str = "pending",
    ) -> int:
        """Get the next nonce of an address, pending transactions included."""
        result = await self.call(
            client,
            "eth_getTransactionCount",
            [address, to_block_param(block_number)],
        )
        return parse_hex_int(result) if result else 0

    async def get_transaction_receipt(
        self, client: "httpx.AsyncClient", tx_hash: str
    ) -> ChainReceipt | None:
        """Fetch a transaction receipt.

        Returns:
            The receipt, or None while the transaction is not included
        """
        result = await self.call(client, "eth_getTransactionReceipt", [tx_hash])
        return ChainReceipt.model_validate(result) if result else None

    async def send_raw_transaction(
        self, client: "httpx.AsyncClient", raw_transaction: bytes
    ) -> str:
        """Submit a signed transaction.

        Returns:
            Transaction hash
        """
        return await self.call(
            client, "eth_sendRawTransaction", [f"0x{raw_transaction.hex()}"]
        )

    async def transfer(
        self,
        client: "httpx.AsyncClient",
        sender: "LocalAccount",
        to: str,
        value: int,
        *,
        nonce: int,
        gas_price: int,
        chain_id: int,
    ) -> str:
        """Sign a plain value transfer with ``sender``'s key and submit it.

        Args:
            client: HTTP client instance
            sender: Funding account holding the private key
            to: Recipient address
            value: Amount in wei
            nonce: Sender nonce to use
            gas_price: Gas price in wei
            chain_id: Chain id to sign for

        Returns:
            Transaction hash

        Example:
            ```python
            async with httpx.AsyncClient() as client:
                rpc = ChainClient("http://node0:8545")
                tx_hash = await rpc.transfer(
                    client, source, target.address, 10**17,
                    nonce=0, gas_price=10**10, chain_id=2152,
                )
            ```
        """
        signed = sender.sign_transaction(
            {
                "to": to,
                "value": value,
                "gas": TRANSFER_GAS,
                "gasPrice": gas_price,
                "nonce": nonce,
                "chainId": chain_id,
            }
        )
        return await self.send_raw_transaction(client, bytes(signed.raw_transaction))


__all__ = ["ChainClient"]
