"""Slot search over a snapshot of occupied (wallet, amount) pairs."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .amounts import INCREMENT_UNITS


@dataclass(frozen=True, slots=True)
class Slot:
    wallet_address: str
    settlement_units: int


def candidate_units(base_units: int, max_increments: int) -> list[int]:
    return [base_units + i * INCREMENT_UNITS for i in range(max_increments)]


def candidate_slots(
    base_units: int,
    wallets: Sequence[str],
    occupied: frozenset[Slot] | set[Slot],
    max_increments: int,
) -> Iterator[Slot]:
    """Yield free slots amount-major, wallet-minor, smallest amount first.

    ``occupied`` is a snapshot; the caller still has to claim each yielded
    slot against the store, which may reject it if it was taken meanwhile.
    """
    for units in candidate_units(base_units, max_increments):
        for wallet in wallets:
            slot = Slot(wallet, units)
            if slot not in occupied:
                yield slot


def first_free_slot(
    base_units: int,
    wallets: Sequence[str],
    occupied: frozenset[Slot] | set[Slot],
    max_increments: int,
) -> Slot | None:
    return next(candidate_slots(base_units, wallets, occupied, max_increments), None)


__all__ = ["Slot", "candidate_slots", "candidate_units", "first_free_slot"]
