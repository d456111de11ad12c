"""Shared data models for the PegNet API.

CRITICAL: Amounts and rates are fixed-point integers (1e-8 units). Never use
float for balances or rates; only final USD totals are rendered as Decimal.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import IntEnum


class ActionType(IntEnum):
    """Kind of a single history action. Values are the stored codes."""

    TRANSFER = 1
    CONVERSION = 2
    COINBASE = 3
    BURN = 4


@dataclass
class HistoryQueryOptions:
    """Pagination and filter options shared by all history selectors.

    When none of the action toggles is set, all action kinds match.
    """

    offset: int = 0
    desc: bool = False
    transfer: bool = False
    conversion: bool = False
    coinbase: bool = False
    burn: bool = False

    def action_types(self) -> list[ActionType]:
        selected = [
            kind
            for kind, enabled in (
                (ActionType.TRANSFER, self.transfer),
                (ActionType.CONVERSION, self.conversion),
                (ActionType.COINBASE, self.coinbase),
                (ActionType.BURN, self.burn),
            )
            if enabled
        ]
        return selected or list(ActionType)


@dataclass
class TransferOutput:
    address: str
    amount: int


@dataclass
class HistoryAction:
    """One action of a stored transaction batch, as returned by history queries."""

    entry_hash: str
    tx_index: int
    height: int
    timestamp: int
    executed: int  # 0 pending, -1 rejected, >0 height applied at
    action_type: ActionType
    from_address: str
    from_asset: str
    from_amount: int
    to_asset: str = ""
    to_amount: int = 0
    outputs: list[TransferOutput] = field(default_factory=list)

    def to_dict(self) -> dict:
        result: dict = {
            "hash": self.entry_hash,
            "txid": f"{self.tx_index}-{self.entry_hash}",
            "height": self.height,
            "timestamp": self.timestamp,
            "executed": self.executed,
            "txaction": int(self.action_type),
            "fromaddress": self.from_address,
            "fromasset": self.from_asset,
            "fromamount": self.from_amount,
        }
        if self.action_type is ActionType.TRANSFER:
            result["outputs"] = [
                {"address": o.address, "amount": o.amount} for o in self.outputs
            ]
        else:
            result["toasset"] = self.to_asset
            result["toamount"] = self.to_amount
        return result


@dataclass
class TransactionBatchRecord:
    """Stored metadata of one transaction batch entry."""

    entry_hash: str
    height: int
    timestamp: int
    executed: int


@dataclass
class HistoryPage:
    """One page of history actions with its pagination cursor."""

    actions: list[HistoryAction]
    count: int
    next_offset: int

    def to_dict(self) -> dict:
        return {
            "actions": [a.to_dict() for a in self.actions],
            "count": self.count,
            "nextoffset": self.next_offset,
        }


@dataclass
class RichEntry:
    """Transient (address, USD value) pair used while ranking balances."""

    address: str
    usd_equiv: Decimal

    def to_dict(self) -> dict:
        # JSON number on the wire; float only at the very edge
        return {"address": self.address, "usdequiv": float(self.usd_equiv)}


@dataclass
class RichList:
    height: int
    top: list[RichEntry]

    def to_dict(self) -> dict:
        return {"height": self.height, "top100": [e.to_dict() for e in self.top]}


@dataclass
class SyncStatus:
    """Locally processed height versus the external chain's height (-1 if unknown)."""

    sync_height: int
    current_height: int

    def to_dict(self) -> dict:
        return {"syncheight": self.sync_height, "factomheight": self.current_height}


@dataclass
class SubmitResult:
    chain_id: str
    entry_hash: str
    txid: str | None = None

    def to_dict(self) -> dict:
        result = {"chainid": self.chain_id, "entryhash": self.entry_hash}
        if self.txid is not None:
            result["txid"] = self.txid
        return result
