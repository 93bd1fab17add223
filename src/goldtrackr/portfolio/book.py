"""
Portfolio holdings and valuation.

Holdings are user input, so every numeric field is validated at the
boundary: anything that is not a finite positive number is rejected
without changing the book.
"""

import logging
import uuid
from collections.abc import Callable
from typing import Any

from goldtrackr.config.constants import (
    ASSET_BTC,
    ASSET_ETH,
    ASSET_GOLD,
    ASSET_PAXG,
    ASSET_XAUT,
    GOLD_BACKED_ASSETS,
    SPOT_GOLD_NAME,
    SPOT_GOLD_SYMBOL,
)
from goldtrackr.core.types import PortfolioEntry, PortfolioPosition, PortfolioValuation
from goldtrackr.market.snapshot import PriceSnapshotStore
from goldtrackr.storage.state import JsonStateStore
from goldtrackr.utils.math import as_positive_float, safe_divide
from goldtrackr.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)

ENTRIES_KEY = "entries"

# Assets that can be held: id -> (symbol, name)
PORTFOLIO_ASSETS: dict[str, tuple[str, str]] = {
    ASSET_GOLD: (SPOT_GOLD_SYMBOL, SPOT_GOLD_NAME),
    ASSET_PAXG: ("PAXG", "PAX Gold"),
    ASSET_XAUT: ("XAUT", "Tether Gold"),
    ASSET_BTC: ("BTC", "Bitcoin"),
    ASSET_ETH: ("ETH", "Ethereum"),
}


def _default_entry_id() -> str:
    return f"{get_timestamp_ms()}-{uuid.uuid4().hex[:8]}"


def _entry_from_dict(raw: Any) -> PortfolioEntry | None:
    if not isinstance(raw, dict):
        return None
    asset_id = raw.get("asset_id")
    amount = as_positive_float(raw.get("amount"))
    buy_price = as_positive_float(raw.get("buy_price"))
    if asset_id not in PORTFOLIO_ASSETS or amount is None or buy_price is None:
        return None
    symbol, name = PORTFOLIO_ASSETS[asset_id]
    return PortfolioEntry(
        id=str(raw.get("id") or _default_entry_id()),
        asset_id=asset_id,
        symbol=symbol,
        name=name,
        amount=amount,
        buy_price=buy_price,
    )


class PortfolioBook:
    """
    User holdings with immediate persistence.

    Entries keep insertion order.
    """

    def __init__(
        self,
        state: JsonStateStore | None = None,
        id_factory: Callable[[], str] = _default_entry_id,
    ) -> None:
        """
        Initialize book and load stored entries.

        Args:
            state: Backing state file. None keeps the book in memory.
            id_factory: Builds ids for new entries.
        """
        self._state = state
        self._id_factory = id_factory
        self._entries: list[PortfolioEntry] = self._load()

    def _load(self) -> list[PortfolioEntry]:
        if self._state is None:
            return []

        loaded: list[PortfolioEntry] = []
        for raw in self._state.get(ENTRIES_KEY, []) or []:
            entry = _entry_from_dict(raw)
            if entry is None:
                logger.warning(f"Skipping invalid stored portfolio entry: {raw!r}")
                continue
            loaded.append(entry)

        logger.debug(f"Loaded {len(loaded)} portfolio entries")
        return loaded

    def _save(self) -> None:
        if self._state is not None:
            self._state.set(ENTRIES_KEY, self._entries)

    def add(self, asset_id: str, amount: Any, buy_price: Any) -> PortfolioEntry | None:
        """
        Add a holding.

        Args:
            asset_id: One of PORTFOLIO_ASSETS.
            amount: Units held; must be a finite number > 0.
            buy_price: USD per unit; must be a finite number > 0.

        Returns:
            The new entry, or None if the input was rejected.
        """
        parsed_amount = as_positive_float(amount)
        parsed_price = as_positive_float(buy_price)
        if asset_id not in PORTFOLIO_ASSETS or parsed_amount is None or parsed_price is None:
            logger.debug(f"Rejected portfolio entry asset={asset_id!r}")
            return None

        symbol, name = PORTFOLIO_ASSETS[asset_id]
        entry = PortfolioEntry(
            id=self._id_factory(),
            asset_id=asset_id,
            symbol=symbol,
            name=name,
            amount=parsed_amount,
            buy_price=parsed_price,
        )
        self._entries.append(entry)
        self._save()
        return entry

    def update(
        self,
        entry_id: str,
        amount: Any = None,
        buy_price: Any = None,
    ) -> PortfolioEntry | None:
        """
        Change the amount and/or buy price of a holding.

        Args:
            entry_id: Entry to change.
            amount: New amount, or None to keep.
            buy_price: New buy price, or None to keep.

        Returns:
            The updated entry, or None if not found or input rejected.
        """
        for index, entry in enumerate(self._entries):
            if entry.id != entry_id:
                continue

            new_amount = entry.amount if amount is None else as_positive_float(amount)
            new_price = entry.buy_price if buy_price is None else as_positive_float(buy_price)
            if new_amount is None or new_price is None:
                return None

            updated = PortfolioEntry(
                id=entry.id,
                asset_id=entry.asset_id,
                symbol=entry.symbol,
                name=entry.name,
                amount=new_amount,
                buy_price=new_price,
            )
            self._entries[index] = updated
            self._save()
            return updated

        return None

    def remove(self, entry_id: str) -> bool:
        """
        Remove a holding.

        Returns:
            True if the entry existed.
        """
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        self._save()
        return True

    def get(self, entry_id: str) -> PortfolioEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    @property
    def entries(self) -> tuple[PortfolioEntry, ...]:
        return tuple(self._entries)

    def value(self, snapshot: PriceSnapshotStore) -> PortfolioValuation:
        """
        Value every holding at current prices.

        Holdings without a live price count as worth 0 and are listed in
        `unpriced`.
        """
        positions: list[PortfolioPosition] = []
        total_value = 0.0
        total_cost = 0.0
        gold_value = 0.0
        unpriced: list[str] = []

        for entry in self._entries:
            price = snapshot.price_of(entry.asset_id)
            priced = price is not None
            current = price if price is not None else 0.0
            if not priced:
                unpriced.append(entry.id)

            value = entry.amount * current
            cost = entry.amount * entry.buy_price
            pnl = value - cost

            positions.append(
                PortfolioPosition(
                    entry=entry,
                    current_price=current,
                    value=value,
                    cost=cost,
                    pnl=pnl,
                    pnl_pct=safe_divide(pnl, cost) * 100.0,
                    priced=priced,
                )
            )
            total_value += value
            total_cost += cost
            if entry.asset_id in GOLD_BACKED_ASSETS:
                gold_value += value

        total_pnl = total_value - total_cost
        gold_pct = safe_divide(gold_value, total_value) * 100.0

        return PortfolioValuation(
            positions=tuple(positions),
            total_value=total_value,
            total_cost=total_cost,
            total_pnl=total_pnl,
            total_pnl_pct=safe_divide(total_pnl, total_cost) * 100.0,
            gold_allocation_pct=gold_pct,
            crypto_allocation_pct=100.0 - gold_pct if total_value > 0 else 0.0,
            unpriced=tuple(unpriced),
        )

    def __len__(self) -> int:
        return len(self._entries)
