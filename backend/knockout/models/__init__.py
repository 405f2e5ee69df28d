from knockout.models.bracket_match import BracketMatch, BracketRound
from knockout.models.competition import Competition, CompetitionFormat
from knockout.models.team import Team

__all__ = [
    "BracketMatch",
    "BracketRound",
    "Competition",
    "CompetitionFormat",
    "Team",
]
