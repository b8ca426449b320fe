"""Common Pydantic models for chain data returned by the JSON-RPC client."""

from pydantic import BaseModel, ConfigDict, Field


class ChainBlock(BaseModel):
    """Block returned by eth_getBlockByNumber (transaction hashes only)."""

    number: str = Field(..., description="Block number as hex string")
    hash: str = Field(..., description="Block hash")
    parent_hash: str = Field(..., description="Parent block hash", alias="parentHash")
    miner: str = Field(..., description="Proposer/validator address")
    timestamp: str = Field(..., description="Block timestamp as hex string")
    gas_limit: str | None = Field(
        default=None, description="Gas limit as hex string", alias="gasLimit"
    )
    gas_used: str | None = Field(
        default=None, description="Gas used as hex string", alias="gasUsed"
    )
    transactions: list[str] = Field(
        default_factory=list, description="Transaction hashes"
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ChainTransaction(BaseModel):
    """Transaction returned by eth_getTransactionByHash."""

    hash: str = Field(..., description="Transaction hash")
    nonce: str = Field(..., description="Sender nonce as hex string")
    from_address: str = Field(..., description="Sender address", alias="from")
    to_address: str | None = Field(
        default=None, description="Recipient, None for contract creation", alias="to"
    )
    value: str = Field(..., description="Transferred value in wei as hex string")
    gas: str | None = Field(default=None, description="Gas limit as hex string")
    gas_price: str | None = Field(
        default=None, description="Gas price as hex string", alias="gasPrice"
    )
    block_number: str | None = Field(
        default=None,
        description="Including block as hex string, None while pending",
        alias="blockNumber",
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ChainReceipt(BaseModel):
    """Receipt returned by eth_getTransactionReceipt."""

    transaction_hash: str = Field(
        ..., description="Transaction hash", alias="transactionHash"
    )
    block_number: str = Field(
        ..., description="Including block as hex string", alias="blockNumber"
    )
    status: str | None = Field(
        default=None, description="0x1 on success, 0x0 on failure"
    )
    gas_used: str | None = Field(
        default=None, description="Gas used as hex string", alias="gasUsed"
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def succeeded(self) -> bool:
        """Whether the transaction executed; receipts without a status count as success."""
        return self.status is None or int(self.status, 16) == 1


__all__ = [
    "ChainBlock",
    "ChainReceipt",
    "ChainTransaction",
]
