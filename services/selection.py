"""Tracking of the location focused in the detail view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union


@dataclass(frozen=True)
class Unselected:
    pass


@dataclass(frozen=True)
class SelectedLocation:
    name: str


SelectionState = Union[Unselected, SelectedLocation]

UNSELECTED = Unselected()


def selected_name(state: SelectionState) -> Optional[str]:
    if isinstance(state, SelectedLocation):
        return state.name
    return None


def reconcile(
    current: SelectionState,
    available: Sequence[str],
    fallback: bool = True,
) -> SelectionState:
    """Resolve ``current`` against the locations present in the latest data.

    An unselected state picks the first available location. A selection whose
    location has disappeared moves to the first available location when
    ``fallback`` is set and is left dangling otherwise. With no locations at all
    the current state is returned unchanged.
    """
    if not available:
        return current
    if isinstance(current, SelectedLocation):
        if current.name in available or not fallback:
            return current
    return SelectedLocation(available[0])
