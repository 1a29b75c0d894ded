"""Place composed steering between the external instruction blocks."""

from __future__ import annotations

BLOCK_SEPARATOR = "\n\n"


def merge(leading: str, composed: str, trailing: str) -> str:
    """Return the instruction chain: *leading*, *composed*, then *trailing*.

    Steering always sits after the broad global instructions and before
    the project instructions, which keep the final word.  Empty blocks
    are dropped, so an empty *composed* leaves the chain exactly as it
    would be without steering.
    """
    return BLOCK_SEPARATOR.join(block for block in (leading, composed, trailing) if block)
