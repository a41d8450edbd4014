"""State persistence - save and load draft sessions to/from JSON files."""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from src.draft_manager.config import DRAFTS_DIR
from src.draft_manager.draft_state import DraftPick, DraftSession, DraftStatus

logger = logging.getLogger(__name__)


class StatePersistence:
    """Handles saving and loading draft sessions to/from JSON files."""

    def __init__(self, storage_dir: Optional[Path] = None):
        self.storage_dir = storage_dir or DRAFTS_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def save_session(self, session: DraftSession) -> Path:
        """Save a session to JSON, replacing the previous file atomically.

        Returns:
            Path to the saved file.
        """
        filepath = self._path_for(session.session_id)
        tmp_path = filepath.with_suffix(".json.tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._session_to_dict(session), f, indent=2)
        os.replace(tmp_path, filepath)

        logger.debug(
            "Saved draft %s (pick %d, round %d) to %s",
            session.session_id,
            session.current_pick,
            session.current_round,
            filepath,
        )
        return filepath

    def load_session(self, session_id: str) -> Optional[DraftSession]:
        """Load a session from JSON.

        Returns:
            DraftSession if found and readable, None otherwise.
        """
        filepath = self._path_for(session_id)

        if not filepath.exists():
            logger.warning("Draft file not found: %s", filepath)
            return None

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                state_dict = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Corrupt draft file %s: %s", filepath, e)
            return None

        logger.info("Loaded draft %s from %s", session_id, filepath)
        return self._dict_to_session(state_dict)

    def list_saved_drafts(self) -> List[Dict]:
        """List saved drafts with metadata, most recently started first.

        Drafts that never started sort last.
        """
        drafts = []

        for filepath in self.storage_dir.glob("draft_*.json"):
            try:
                with open(filepath, "r", encoding="utf-8") as f:
                    data = json.load(f)

                drafts.append(
                    {
                        "session_id": data["session_id"],
                        "league_id": data["league_id"],
                        "status": data.get("status", DraftStatus.NOT_STARTED.value),
                        "start_time": data.get("start_time"),
                        "current_round": data.get("current_round", 1),
                        "current_pick": data.get("current_pick", 1),
                        "total_picks_made": len(data.get("picks", [])),
                    }
                )
            except (json.JSONDecodeError, OSError, KeyError, TypeError) as e:
                logger.warning("Skipping corrupt draft file %s: %s", filepath, e)
                continue

        return sorted(drafts, key=lambda x: x["start_time"] or "", reverse=True)

    def delete_session(self, session_id: str) -> bool:
        """Delete a saved session file. Returns False if it did not exist."""
        filepath = self._path_for(session_id)
        if not filepath.exists():
            return False
        filepath.unlink()
        logger.info("Deleted draft %s", session_id)
        return True

    def _path_for(self, session_id: str) -> Path:
        return self.storage_dir / f"draft_{session_id}.json"

    def _session_to_dict(self, session: DraftSession) -> Dict:
        """Convert DraftSession to JSON-serializable dict."""
        return {
            "session_id": session.session_id,
            "league_id": session.league_id,
            "seconds_per_pick": session.seconds_per_pick,
            "draft_order": session.draft_order,
            "current_pick": session.current_pick,
            "current_round": session.current_round,
            "status": session.status.value,
            "start_time": session.start_time,
            "end_time": session.end_time,
            "picks": [
                {
                    "team_id": pick.team_id,
                    "player_id": pick.player_id,
                    "pick_number": pick.pick_number,
                    "round": pick.round,
                    "is_auto_pick": pick.is_auto_pick,
                    "timestamp": pick.timestamp,
                }
                for pick in session.picks
            ],
        }

    def _dict_to_session(self, data: Dict) -> DraftSession:
        """Reconstruct DraftSession from dict."""
        session_id = data["session_id"]
        picks = [
            DraftPick(
                session_id=session_id,
                team_id=pd["team_id"],
                player_id=pd["player_id"],
                pick_number=pd["pick_number"],
                round=pd["round"],
                is_auto_pick=pd.get("is_auto_pick", False),
                timestamp=pd["timestamp"],
            )
            for pd in data.get("picks", [])
        ]

        return DraftSession(
            session_id=session_id,
            league_id=data["league_id"],
            seconds_per_pick=data["seconds_per_pick"],
            draft_order=data.get("draft_order", []),
            current_pick=data.get("current_pick", 1),
            current_round=data.get("current_round", 1),
            status=DraftStatus(data.get("status", DraftStatus.NOT_STARTED.value)),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            picks=picks,
        )
