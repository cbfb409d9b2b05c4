from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Achievement:
    """A rivalry milestone earned against one opponent. Never persisted."""
    id: str
    name: str
    description: str
    icon: str
    earned_at: datetime
