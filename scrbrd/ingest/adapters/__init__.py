from ingest.adapters.base import AdapterResult, LeagueAdapter
from ingest.adapters.baseball import BaseballAdapter
from ingest.adapters.basketball import BasketballAdapter
from ingest.adapters.football import FootballAdapter
from ingest.adapters.hockey import HockeyAdapter
from ingest.adapters.soccer import SoccerAdapter

__all__ = [
    "AdapterResult",
    "LeagueAdapter",
    "BaseballAdapter",
    "BasketballAdapter",
    "FootballAdapter",
    "HockeyAdapter",
    "SoccerAdapter",
]
