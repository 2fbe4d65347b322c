"""
Stand-up Room – SQLAlchemy ORM models package.

Imports all model classes so the app can discover them through a single
``import standup.models``.
"""

from standup.models.room import Room                            # noqa: F401
from standup.models.participant import Participant              # noqa: F401
from standup.models.participant_claim import ParticipantClaim   # noqa: F401
from standup.models.spin_history import SpinHistory             # noqa: F401
from standup.models.poker import PokerRound, PokerVote, RoundStatus  # noqa: F401
from standup.models.impediment import Impediment, ImpedimentStatus  # noqa: F401
