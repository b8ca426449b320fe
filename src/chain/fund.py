"""Fund test accounts from a source account with signed value transfers."""

from asyncio import sleep
from pathlib import Path

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table

from src.helpers.constants import BLOCK_TIME, FUND_UNIT_WEI, TRANSFER_GAS
from src.helpers.http import create_http_client
from src.helpers.keys import create_accounts, load_keys, save_keys
from src.helpers.logging import get_logger
from src.helpers.parsers import wei_to_eth
from src.helpers.progress import track_progress
from src.helpers.rpc import ChainClient


if TYPE_CHECKING:
    import httpx
    from eth_account.signers.local import LocalAccount


logger = get_logger(__name__)


class FundTransfer(BaseModel):
    """One funding transfer and what became of it."""

    address: str = Field(..., description="Funded account")
    value: int = Field(..., ge=0, description="Amount sent in wei")
    tx_hash: str = Field(..., description="Transfer transaction hash")
    status: str = Field(
        default="pending", description="pending, confirmed or failed"
    )


def transfers_table(transfers: list[FundTransfer]) -> Table:
    """Render transfers as a table, one row per funded account."""
    table = Table(title="Funded accounts")
    table.add_column("Account")
    table.add_column("Amount (ETH)", justify="right")
    table.add_column("Transaction")
    table.add_column("Status")
    for transfer in transfers:
        table.add_row(
            transfer.address,
            str(wei_to_eth(transfer.value)),
            transfer.tx_hash,
            transfer.status,
        )
    return table


async def fund_accounts(
    rpc_url: str,
    timeout: float,
    source_keys: Path | str,
    fund_keys: Path | str,
    *,
    count: int = 0,
    amount: int = 1,
    load: bool = False,
    redeposit: bool = False,
    block_time: int = BLOCK_TIME,
    console: Console | None = None,
) -> list[FundTransfer]:
    """Send ``amount`` x 0.1 ETH from the source account to each target account.

    Targets are ``count`` fresh accounts whose keys are saved to
    ``fund_keys`` before anything is sent, or with ``load`` the accounts
    already in ``fund_keys``. With ``redeposit`` only targets holding less
    than the amount are funded. After sending, the command waits one block
    time and reports the receipt status of every transfer.

    Args:
        rpc_url: JSON-RPC endpoint
        timeout: Request timeout in seconds
        source_keys: Key file whose first key is the funding account
        fund_keys: Key file of the funded accounts
        count: Number of accounts to create when not loading
        amount: Amount per account in units of 0.1 ETH
        load: Fund the accounts of ``fund_keys`` instead of new ones
        redeposit: Skip targets that already hold the amount
        block_time: Seconds to wait before checking receipts
        console: Output console

    Returns:
        One transfer per funded account, in key file order

    Raises:
        ValueError: On bad arguments, unreadable key files, or when the
            source balance cannot cover every transfer
        httpx.HTTPError: If the node cannot be reached
    """
    if count < 0 or amount < 1 or block_time < 0:
        msg = (
            f"count and block time must not be negative and amount must be at "
            f"least 1, got count={count} amount={amount} block_time={block_time}"
        )
        raise ValueError(msg)

    console = console or Console()
    source = load_keys(source_keys)[0]
    if load:
        targets = load_keys(fund_keys)
    else:
        targets = create_accounts(count)
        if targets:
            save_keys(fund_keys, targets)

    value = amount * FUND_UNIT_WEI
    rpc = ChainClient(rpc_url, timeout=timeout)
    async with create_http_client(timeout=timeout) as client:
        if redeposit:
            targets = await needing_funds(rpc, client, targets, value)
        if not targets:
            console.print("[yellow]No accounts to fund[/yellow]")
            return []

        chain_id = await rpc.get_chain_id(client)
        gas_price = await rpc.get_gas_price(client)
        needed = len(targets) * (value + TRANSFER_GAS * gas_price)
        balance = await rpc.get_balance(client, source.address)
        if balance < needed:
            msg = (
                f"source {source.address} holds {wei_to_eth(balance)} ETH, "
                f"funding {len(targets)} accounts needs {wei_to_eth(needed)} ETH"
            )
            raise ValueError(msg)

        nonce = await rpc.get_transaction_count(client, source.address)
        transfers: list[FundTransfer] = []
        with track_progress(
            "Funding accounts", total=len(targets), console=console
        ) as (progress, task_id):
            for offset, target in enumerate(targets):
                tx_hash = await rpc.transfer(
                    client,
                    source,
                    target.address,
                    value,
                    nonce=nonce + offset,
                    gas_price=gas_price,
                    chain_id=chain_id,
                )
                transfers.append(
                    FundTransfer(address=target.address, value=value, tx_hash=tx_hash)
                )
                progress.update(task_id, advance=1)
        logger.info(
            "Sent %d transfers of %s ETH from %s",
            len(transfers),
            wei_to_eth(value),
            source.address,
        )

        if block_time:
            logger.info("Waiting %ds for inclusion", block_time)
            await sleep(block_time)
        for transfer in transfers:
            receipt = await rpc.get_transaction_receipt(client, transfer.tx_hash)
            if receipt is not None:
                transfer.status = "confirmed" if receipt.succeeded else "failed"

    console.print(transfers_table(transfers))
    return transfers


async def needing_funds(
    rpc: ChainClient,
    client: "httpx.AsyncClient",
    targets: "list[LocalAccount]",
    value: int,
) -> "list[LocalAccount]":
    """Targets whose balance is below ``value``."""
    needy = []
    for target in targets:
        balance = await rpc.get_balance(client, target.address)
        if balance < value:
            needy.append(target)
        else:
            logger.debug("%s holds %d wei, skipping", target.address, balance)
    logger.info("%d of %d accounts need funds", len(needy), len(targets))
    return needy


__all__ = [
    "FundTransfer",
    "fund_accounts",
    "needing_funds",
    "transfers_table",
]
