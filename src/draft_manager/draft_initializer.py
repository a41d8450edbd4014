"""Draft initialization - creates leagues with their empty draft sessions."""

import json
import logging
import uuid
from pathlib import Path
from typing import List, Optional

from src.draft_manager.config import (
    DEFAULT_MAX_TEAMS,
    DEFAULT_ROSTER_SIZE,
    DEFAULT_SECONDS_PER_PICK,
    DEFAULT_STARTER_COUNT,
    MAX_ROSTER_SIZE,
    MAX_STARTER_COUNT,
    MAX_TEAMS,
    MIN_PARTICIPANTS,
    MIN_ROSTER_SIZE,
    MIN_STARTER_COUNT,
    PROCESSED_DATA_DIR,
)
from src.draft_manager.draft_rules import ValidationError
from src.draft_manager.draft_state import DraftSession, League, LeagueStatus
from src.draft_manager.league_store import InMemoryLeagueStore
from src.draft_manager.player_catalog import Player, PlayerCatalog
from src.draft_manager.session_repository import DraftSessionRepository
from src.scoring_engine.models import ScoringRules

logger = logging.getLogger(__name__)


class DraftInitializer:
    """Handles creation of leagues, their teams and their draft sessions."""

    def __init__(
        self,
        league_store: InMemoryLeagueStore,
        repository: DraftSessionRepository,
        player_catalog: PlayerCatalog,
        processed_data_dir: Optional[Path] = None,
    ):
        self.league_store = league_store
        self.repository = repository
        self.player_catalog = player_catalog
        self.processed_data_dir = processed_data_dir or PROCESSED_DATA_DIR

    def create_league(
        self,
        name: str,
        team_names: Optional[List[str]] = None,
        roster_size: int = DEFAULT_ROSTER_SIZE,
        starter_count: int = DEFAULT_STARTER_COUNT,
        max_teams: int = DEFAULT_MAX_TEAMS,
        seconds_per_pick: int = DEFAULT_SECONDS_PER_PICK,
        scoring_rules: Optional[ScoringRules] = None,
    ) -> DraftSession:
        """
        Create a league and its not-yet-started draft.

        Args:
            name: League name (3-50 characters)
            team_names: Teams joining at creation; more may join later
            roster_size: Players drafted per team (4-10)
            starter_count: Starters per lineup (2-6, at most roster_size)
            max_teams: League capacity (2-16)
            seconds_per_pick: Time allowed per pick before auto-pick
            scoring_rules: League scoring weights (default rules if None)

        Returns:
            The league's empty DraftSession
        """
        team_names = list(team_names or [])
        self._validate_inputs(
            name, team_names, roster_size, starter_count, max_teams, seconds_per_pick
        )

        league_id = str(uuid.uuid4())
        league = League(
            league_id=league_id,
            name=name.strip(),
            team_ids=[self._new_team_id() for _ in team_names],
            team_names=[t.strip() for t in team_names],
            roster_size=roster_size,
            starter_count=starter_count,
            max_teams=max_teams,
            seconds_per_pick=seconds_per_pick,
            scoring_rules=scoring_rules or ScoringRules(),
        )
        session = DraftSession(
            session_id=str(uuid.uuid4()),
            league_id=league_id,
            seconds_per_pick=seconds_per_pick,
        )

        self.league_store.add_league(league)
        self.repository.add(session)

        logger.info(
            "Created league %s (%s): %d teams, roster %d, %ds per pick",
            league_id,
            league.name,
            len(league.team_ids),
            roster_size,
            seconds_per_pick,
        )
        return session

    def join_league(self, league_id: str, team_name: str) -> str:
        """Add a team to a league that has not started drafting.

        Returns:
            The new team's ID
        """
        league = self.league_store.get_league(league_id)
        if league is None:
            raise ValidationError(f"League {league_id} not found")
        if league.status != LeagueStatus.PRE_DRAFT:
            raise ValidationError("Cannot join league after draft has started")
        if len(league.team_ids) >= league.max_teams:
            raise ValidationError("League is full")
        self._validate_team_names(league.team_names + [team_name])

        team_id = self._new_team_id()
        league.team_ids.append(team_id)
        league.team_names.append(team_name.strip())
        logger.info("Team %s (%s) joined league %s", team_id, team_name, league_id)
        return team_id

    def load_players(self, season: int) -> int:
        """Load a season's processed player file into the catalog.

        Returns:
            Number of players loaded
        """
        players = self._load_player_data(season)
        self.player_catalog.add_players(players)
        return len(players)

    def _validate_inputs(
        self,
        name: str,
        team_names: List[str],
        roster_size: int,
        starter_count: int,
        max_teams: int,
        seconds_per_pick: int,
    ):
        """Validate league configuration inputs."""
        if not name or not 3 <= len(name.strip()) <= 50:
            raise ValidationError("League name must be 3-50 characters")

        if not MIN_PARTICIPANTS <= max_teams <= MAX_TEAMS:
            raise ValidationError(
                f"Max teams must be between {MIN_PARTICIPANTS} and {MAX_TEAMS}"
            )

        if len(team_names) > max_teams:
            raise ValidationError(
                f"Number of teams ({len(team_names)}) exceeds max teams ({max_teams})"
            )

        if not MIN_ROSTER_SIZE <= roster_size <= MAX_ROSTER_SIZE:
            raise ValidationError(
                f"Roster size must be between {MIN_ROSTER_SIZE} and {MAX_ROSTER_SIZE}"
            )

        if not MIN_STARTER_COUNT <= starter_count <= MAX_STARTER_COUNT:
            raise ValidationError(
                f"Starter count must be between {MIN_STARTER_COUNT} "
                f"and {MAX_STARTER_COUNT}"
            )

        if starter_count > roster_size:
            raise ValidationError("Starter count cannot exceed roster size")

        if seconds_per_pick <= 0:
            raise ValidationError("Seconds per pick must be positive")

        self._validate_team_names(team_names)

    @staticmethod
    def _validate_team_names(team_names: List[str]):
        for team_name in team_names:
            if not team_name or not 3 <= len(team_name.strip()) <= 30:
                raise ValidationError(
                    f"Team name {team_name!r} must be 3-30 characters"
                )
        normalized = [t.strip().lower() for t in team_names]
        if len(set(normalized)) != len(normalized):
            raise ValidationError("Team names must be unique within a league")

    def _load_player_data(self, season: int) -> List[Player]:
        """Load players from the processed JSON written by the data pipeline."""
        season_file = self.processed_data_dir / f"players_{season}.json"

        if not season_file.exists():
            raise FileNotFoundError(
                f"No player data found for {season}. "
                "Run data pipeline first: "
                "python -m src.data_pipeline.run_update"
            )

        with open(season_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        try:
            players = [Player.from_dict(player) for player in data["players"]]
        except KeyError as e:
            raise ValueError(
                f"Malformed player data file for {season}: missing key {e}. "
                "Re-run data pipeline to regenerate."
            ) from e

        logger.info("Loaded %d players for %d season", len(players), season)
        return players

    @staticmethod
    def _new_team_id() -> str:
        return uuid.uuid4().hex[:12]
