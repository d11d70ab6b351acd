"""
Carried boxes buffer - boxes crossing from one level into the next.

Filled once by the capture that runs when the player leaves a level,
drained once when the next level is entered.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator

from puzzle.errors import StaleCarriedBuffer

if TYPE_CHECKING:
    from puzzle.levelstate.snapshot import CarriedBox


class CarriedBoxesBuffer:
    """Single-writer, single-reader hand-off of carried boxes."""

    def __init__(self):
        self._entries: list[CarriedBox] = []

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def fill(self, entries: Iterable[CarriedBox]) -> None:
        """
        Store the boxes leaving with the player.

        Raises:
            StaleCarriedBuffer: If earlier entries were never drained
        """
        entries = list(entries)
        if not entries:
            return
        if self._entries:
            raise StaleCarriedBuffer(
                f"Refusing to add {len(entries)} carried box(es) on top of "
                f"{len(self._entries)} undrained one(s)"
            )
        self._entries = entries

    def drain(self) -> list[CarriedBox]:
        """Take every entry out of the buffer."""
        entries, self._entries = self._entries, []
        return entries

    def peek(self) -> tuple[CarriedBox, ...]:
        """Read the entries without consuming them."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CarriedBox]:
        return iter(tuple(self._entries))
