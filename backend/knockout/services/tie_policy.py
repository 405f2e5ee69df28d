"""
Knockout draw handling.

A knockout match that ends level has no automatic winner. The policy hook below
is consulted by result propagation when scores are equal; it returns the
winning slot ("home" / "away") or None to leave the match unresolved.

The default policy never picks a winner: the match is stored as completed with
its scores and the bracket waits for an administrator to declare the winner.
"""
from typing import Optional, Protocol

from knockout.models.bracket_match import BracketMatch


class TiePolicy(Protocol):
    def resolve(self, match: BracketMatch) -> Optional[str]:
        ...


class ManualResolution:
    """Leave drawn knockout matches for manual resolution."""

    def resolve(self, match: BracketMatch) -> Optional[str]:
        return None


DEFAULT_TIE_POLICY: TiePolicy = ManualResolution()
