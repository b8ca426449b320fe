"""Command line entry point: ETL over node logs, chain queries and funding."""

import sys
from argparse import ArgumentParser, Namespace
from asyncio import run

import httpx
from rich.console import Console

from src.chain.commands import show_blocks, show_info, show_transaction
from src.chain.fund import fund_accounts
from src.etl.pipeline import EtlConfig, EtlPipeline
from src.helpers.config import get_log_level, get_rpc_url
from src.helpers.constants import (
    BLOCK_TIME,
    DEFAULT_FUND_KEYS,
    DEFAULT_SOURCE_KEYS,
    DEFAULT_TIMEOUT,
)
from src.helpers.errors import IngestionError, StoreError
from src.helpers.logging import get_logger, set_log_level

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_INGESTION_ERROR = 2
EXIT_STORE_ERROR = 3
EXIT_NETWORK_ERROR = 4

logger = get_logger("main")


def build_parser() -> ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = ArgumentParser(
        description="Block performance ETL, chain queries and account funding"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="DEBUG, INFO, WARNING, ERROR or CRITICAL (default: $LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    etl = subparsers.add_parser("etl", help="ETL procession of node logs")
    etl.add_argument("--abcid", help="abcid log file")
    etl.add_argument("--tendermint", help="tendermint log file")
    etl.add_argument(
        "--redis",
        default=None,
        help="Redis address: host:port or socket path (default: $ETL_STORE_ADDRESS or 127.0.0.1:6379)",
    )
    etl.add_argument(
        "--load",
        action="store_true",
        help="Skip ingestion, report from previously stored data",
    )
    etl.add_argument(
        "--abcid-prefix-width",
        type=int,
        default=None,
        help="Fixed abcid header width (default: split from the 'tps,' marker)",
    )

    chain_parent = ArgumentParser(add_help=False)
    chain_parent.add_argument(
        "--network",
        default=None,
        help="Ethereum-compatible JSON-RPC URL (default: $CHAIN_RPC_URL)",
    )
    chain_parent.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="HTTP request timeout, seconds",
    )

    fund = subparsers.add_parser(
        "fund", parents=[chain_parent], help="Fund Ethereum accounts"
    )
    fund.add_argument(
        "--source",
        default=DEFAULT_SOURCE_KEYS,
        help="Key file of the funding account, first key is used",
    )
    fund.add_argument(
        "--keys",
        default=DEFAULT_FUND_KEYS,
        help="Key file of the funded accounts, written unless --load is given",
    )
    fund.add_argument(
        "--count", type=int, default=0, help="Number of accounts to create and fund"
    )
    fund.add_argument(
        "--amount", type=int, default=1, help="Amount per account in units of 0.1 ETH"
    )
    fund.add_argument(
        "--load", action="store_true", help="Fund the accounts of the --keys file"
    )
    fund.add_argument(
        "--redeposit",
        action="store_true",
        help="Only fund accounts holding less than the amount",
    )
    fund.add_argument(
        "--block-time",
        type=int,
        default=BLOCK_TIME,
        help="Block time of the network, seconds to wait before checking receipts",
    )

    info = subparsers.add_parser(
        "info", parents=[chain_parent], help="Check account information"
    )
    info.add_argument("--account", required=True, help="Account address")

    transaction = subparsers.add_parser(
        "transaction", parents=[chain_parent], help="Transaction operations"
    )
    transaction.add_argument("--hash", required=True, help="Transaction hash")

    block = subparsers.add_parser(
        "block", parents=[chain_parent], help="Block operations"
    )
    block.add_argument(
        "--start", type=int, default=None, help="Start block height (default: latest)"
    )
    block.add_argument(
        "--count",
        type=int,
        default=None,
        help="Block count, may be negative to walk backwards (default: 1)",
    )

    return parser


async def run_command(args: Namespace) -> int:
    """Dispatch a parsed command.

    Returns:
        Process exit code
    """
    if args.command == "etl":
        config = EtlConfig(
            abcid_log_path=args.abcid,
            tendermint_log_path=args.tendermint,
            load=args.load,
            abcid_prefix_width=args.abcid_prefix_width,
            **({"store_address": args.redis} if args.redis else {}),
        )
        await EtlPipeline(config).run()
        return EXIT_OK

    rpc_url = get_rpc_url(args.network)
    console = Console()
    if args.command == "fund":
        await fund_accounts(
            rpc_url,
            args.timeout,
            args.source,
            args.keys,
            count=args.count,
            amount=args.amount,
            load=args.load,
            redeposit=args.redeposit,
            block_time=args.block_time,
            console=console,
        )
    elif args.command == "info":
        await show_info(rpc_url, args.account, args.timeout, console)
    elif args.command == "transaction":
        await show_transaction(rpc_url, args.hash, args.timeout, console)
    elif args.command == "block":
        await show_blocks(rpc_url, args.timeout, args.start, args.count, console)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the command and map failures to exit codes."""
    args = build_parser().parse_args(argv)

    try:
        set_log_level(get_log_level(args.log_level))
        return run(run_command(args))
    except IngestionError as e:
        logger.error("Ingestion failed for %s: %s", e.path, e)
        return EXIT_INGESTION_ERROR
    except StoreError as e:
        logger.error("Record store failure: %s", e)
        return EXIT_STORE_ERROR
    except httpx.HTTPError as e:
        logger.error("%s request failed: %s", args.command, e)
        return EXIT_NETWORK_ERROR
    except ValueError as e:
        # pydantic ValidationError is a ValueError too
        logger.error("%s failed: %s", args.command, e)
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    sys.exit(main())
