"""ORM models."""

from models.base import Base
from models.match import Match
from models.player import Player
from models.rating_change import PlayerRatingChange

__all__ = [
    "Base",
    "Match",
    "Player",
    "PlayerRatingChange",
]
