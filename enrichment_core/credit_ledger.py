"""
Credit ledger interface consumed by the orchestrator, plus an in-memory
reference implementation.

The orchestrator only ever calls has_balance() before a paid provider call
and charge() after a provider returned usable data. Durable storage of
balances and transactions belongs to the embedding application; the
in-memory ledger serves tests and single-process embeddings.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .errors import ClientNotFoundError, InsufficientCreditsError, LedgerError

logger = logging.getLogger(__name__)

__all__ = [
    "ChargeReceipt",
    "ChargeRequest",
    "ClientNotFoundError",
    "CreditLedger",
    "CreditTransaction",
    "InMemoryCreditLedger",
    "InsufficientCreditsError",
    "LedgerError",
]


@dataclass
class ChargeRequest:
    """What the orchestrator asks the ledger to bill."""

    base_cost: float
    source: str
    operation: str
    description: str
    job_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ChargeReceipt:
    """Outcome of a successful charge."""

    client_id: str
    base_cost: float
    margin_amount: float
    total_charged: float
    balance_after: float


@dataclass
class CreditTransaction:
    """One ledger movement (usage, purchase, adjustment or refund)."""

    client_id: str
    type: str
    amount: float
    balance_after: float
    description: str
    base_cost: Optional[float] = None
    margin_amount: Optional[float] = None
    data_source: Optional[str] = None
    operation_type: Optional[str] = None
    job_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class CreditLedger(ABC):
    """
    Authorizes and records spend per client.

    Implementations raise LedgerError subclasses (or let their own
    infrastructure errors escape) when they cannot answer; the orchestrator
    treats any exception from the ledger as fatal.
    """

    @abstractmethod
    async def has_balance(self, client_id: str, amount: float) -> bool:
        """Return True if the client can afford `amount` credits."""

    @abstractmethod
    async def charge(self, client_id: str, request: ChargeRequest) -> ChargeReceipt:
        """Bill the client for one provider call."""


class InMemoryCreditLedger(CreditLedger):
    """Process-local ledger with per-client balance and margin."""

    def __init__(self) -> None:
        self._balances: Dict[str, float] = {}
        self._margins: Dict[str, float] = {}
        self._transactions: Dict[str, List[CreditTransaction]] = {}
        self._lock = asyncio.Lock()

    def open_account(
        self, client_id: str, balance: float = 0.0, margin_percent: float = 0.0
    ) -> None:
        """Create (or reset) a client account."""
        if margin_percent < 0:
            raise ValueError("margin_percent cannot be negative")
        self._balances[client_id] = float(balance)
        self._margins[client_id] = float(margin_percent)
        self._transactions[client_id] = []

    async def has_balance(self, client_id: str, amount: float) -> bool:
        balance = self._balances.get(client_id)
        if balance is None:
            return False
        return balance >= amount

    async def charge(self, client_id: str, request: ChargeRequest) -> ChargeReceipt:
        async with self._lock:
            balance = self._require_balance(client_id)
            margin = request.base_cost * (self._margins[client_id] / 100)
            total = request.base_cost + margin
            new_balance = balance - total
            if new_balance < 0:
                raise InsufficientCreditsError(client_id, total, balance)

            self._balances[client_id] = new_balance
            self._transactions[client_id].append(
                CreditTransaction(
                    client_id=client_id,
                    type="usage",
                    amount=-total,
                    balance_after=new_balance,
                    description=request.description,
                    base_cost=request.base_cost,
                    margin_amount=margin,
                    data_source=request.source,
                    operation_type=request.operation,
                    job_id=request.job_id,
                    metadata=dict(request.metadata),
                )
            )

        logger.debug(
            f"Credits charged: client={client_id} source={request.source} "
            f"operation={request.operation} base_cost={request.base_cost}"
        )
        return ChargeReceipt(
            client_id=client_id,
            base_cost=request.base_cost,
            margin_amount=margin,
            total_charged=total,
            balance_after=new_balance,
        )

    async def add_credits(
        self, client_id: str, amount: float, type: str, description: str
    ) -> float:
        """
        Credit a client's account.

        Args:
            client_id: Client to credit
            amount: Credits to add
            type: 'purchase', 'adjustment' or 'refund'
            description: Human-readable reason

        Returns:
            The new balance
        """
        if type not in ("purchase", "adjustment", "refund"):
            raise ValueError(f"Unknown credit transaction type: {type}")
        async with self._lock:
            new_balance = self._require_balance(client_id) + amount
            self._balances[client_id] = new_balance
            self._transactions[client_id].append(
                CreditTransaction(
                    client_id=client_id,
                    type=type,
                    amount=amount,
                    balance_after=new_balance,
                    description=description,
                )
            )

        logger.info(f"Credits added: client={client_id} amount={amount} type={type} balance={new_balance}")
        return new_balance

    async def get_balance(self, client_id: str) -> float:
        return self._require_balance(client_id)

    async def get_transactions(
        self, client_id: str, limit: int = 50, offset: int = 0
    ) -> List[CreditTransaction]:
        """Transactions oldest first, paginated."""
        self._require_balance(client_id)
        return self._transactions[client_id][offset : offset + limit]

    def _require_balance(self, client_id: str) -> float:
        balance = self._balances.get(client_id)
        if balance is None:
            raise ClientNotFoundError(client_id)
        return balance
