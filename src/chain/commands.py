"""Account, transaction and block queries against a full node."""

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from src.helpers.http import create_http_client
from src.helpers.logging import get_logger
from src.helpers.parsers import parse_hex_int, parse_hex_timestamp, wei_to_eth
from src.helpers.rpc import ChainClient


if TYPE_CHECKING:
    from src.helpers.models import ChainBlock


logger = get_logger(__name__)


def block_heights(start: int, count: int) -> list[int]:
    """Heights covered by ``count`` blocks from ``start``.

    A negative count walks backwards from ``start``; heights below zero are
    dropped.

    Example:
        >>> block_heights(10, 3)
        [10, 11, 12]
        >>> block_heights(10, -3)
        [10, 9, 8]
        >>> block_heights(1, -3)
        [1, 0]
    """
    if count >= 0:
        return list(range(start, start + count))
    return list(range(start, max(start + count, -1), -1))


def blocks_table(blocks: "list[ChainBlock]") -> Table:
    """Render blocks as a table, one row per block."""
    table = Table(title="Blocks")
    table.add_column("Height", justify="right")
    table.add_column("Time (UTC)")
    table.add_column("Block time", justify="right")
    table.add_column("Txs", justify="right")
    table.add_column("Gas used", justify="right")
    table.add_column("Hash")

    previous_ts: int | None = None
    for block in sorted(blocks, key=lambda b: parse_hex_int(b.number)):
        ts = parse_hex_int(block.timestamp)
        block_time = "" if previous_ts is None else str(ts - previous_ts)
        table.add_row(
            str(parse_hex_int(block.number)),
            parse_hex_timestamp(block.timestamp).strftime("%Y-%m-%d %H:%M:%S"),
            block_time,
            str(len(block.transactions)),
            f"{parse_hex_int(block.gas_used):,}",
            block.hash,
        )
        previous_ts = ts
    return table


async def show_info(
    rpc_url: str, account: str, timeout: float, console: Console | None = None
) -> int:
    """Print the balance of ``account``.

    Returns:
        Balance in wei
    """
    console = console or Console()
    rpc = ChainClient(rpc_url, timeout=timeout)
    async with create_http_client(timeout=timeout) as client:
        balance = await rpc.get_balance(client, account)

    console.print(f"{account}: {wei_to_eth(balance)} ({balance} wei)")
    return balance


async def show_transaction(
    rpc_url: str, tx_hash: str, timeout: float, console: Console | None = None
) -> bool:
    """Print a transaction summary.

    Returns:
        False if the node does not know the transaction
    """
    console = console or Console()
    rpc = ChainClient(rpc_url, timeout=timeout)
    async with create_http_client(timeout=timeout) as client:
        tx = await rpc.get_transaction(client, tx_hash)

    if tx is None:
        console.print(f"[yellow]Transaction {tx_hash} not found[/yellow]")
        return False

    table = Table(title=f"Transaction {tx.hash}", show_header=False)
    table.add_row("From", tx.from_address)
    table.add_row("To", tx.to_address or "(contract creation)")
    table.add_row("Value", f"{wei_to_eth(parse_hex_int(tx.value))} ETH")
    table.add_row("Nonce", str(parse_hex_int(tx.nonce)))
    table.add_row("Gas", str(parse_hex_int(tx.gas)))
    table.add_row(
        "Block",
        str(parse_hex_int(tx.block_number)) if tx.block_number else "pending",
    )
    console.print(table)
    return True


async def show_blocks(
    rpc_url: str,
    timeout: float,
    start: int | None = None,
    count: int | None = None,
    console: Console | None = None,
) -> "list[ChainBlock]":
    """Print ``count`` blocks from ``start``.

    Args:
        rpc_url: JSON-RPC endpoint
        timeout: Request timeout in seconds
        start: First height, the chain head when None
        count: Number of blocks, negative to walk backwards, 1 when None
        console: Output console

    Returns:
        The blocks that exist, in the order requested
    """
    console = console or Console()
    rpc = ChainClient(rpc_url, timeout=timeout)
    blocks: list[ChainBlock] = []
    async with create_http_client(timeout=timeout) as client:
        if start is None:
            start = await rpc.get_block_number(client)
        for height in block_heights(start, 1 if count is None else count):
            block = await rpc.get_block(client, height)
            if block is None:
                logger.warning("Block %d not found, stopping", height)
                break
            blocks.append(block)

    if blocks:
        console.print(blocks_table(blocks))
    else:
        console.print("[yellow]No blocks found[/yellow]")
    return blocks


__all__ = [
    "block_heights",
    "blocks_table",
    "show_blocks",
    "show_info",
    "show_transaction",
]
