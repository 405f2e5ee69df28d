# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from knockout.models.bracket_match import BracketMatch  # noqa: F401
from knockout.models.competition import Competition  # noqa: F401
from knockout.models.team import Team  # noqa: F401
