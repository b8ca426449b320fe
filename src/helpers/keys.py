"""Key files: one hex-encoded secp256k1 private key per line."""

from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount

from src.helpers.logging import get_logger


logger = get_logger(__name__)


def load_keys(path: Path | str) -> list[LocalAccount]:
    """Load every account of a key file.

    Blank lines and lines starting with ``#`` are skipped.

    Args:
        path: Key file to read

    Returns:
        Accounts in file order

    Raises:
        ValueError: If the file cannot be read, holds an invalid key or no key at all

    Example:
        ```python
        from src.helpers.keys import load_keys

        source = load_keys("source_keys.001")[0]
        print(source.address)
        ```
    """
    path = Path(path)
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        msg = f"cannot read key file {path}: {e}"
        raise ValueError(msg) from e

    accounts: list[LocalAccount] = []
    for line_number, line in enumerate(lines, start=1):
        key = line.strip()
        if not key or key.startswith("#"):
            continue
        try:
            accounts.append(Account.from_key(key))
        except ValueError as e:
            # Never echo the key itself
            msg = f"{path}:{line_number}: invalid private key"
            raise ValueError(msg) from e

    if not accounts:
        msg = f"no keys in {path}"
        raise ValueError(msg)

    logger.debug("Loaded %d keys from %s", len(accounts), path)
    return accounts


def create_accounts(count: int) -> list[LocalAccount]:
    """Create ``count`` fresh random accounts."""
    return [Account.create() for _ in range(count)]


def save_keys(path: Path | str, accounts: list[LocalAccount]) -> None:
    """Write the private keys of ``accounts`` to a key file readable by the owner only."""
    path = Path(path)
    path.write_text(
        "".join(f"0x{bytes(account.key).hex()}\n" for account in accounts),
        encoding="utf-8",
    )
    path.chmod(0o600)
    logger.info("Saved %d keys to %s", len(accounts), path)


__all__ = [
    "create_accounts",
    "load_keys",
    "save_keys",
]
