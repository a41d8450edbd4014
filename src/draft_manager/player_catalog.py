"""Player catalog - the pool of draftable professional players."""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Player:
    """A professional player that can be drafted."""

    player_id: str
    gamer_tag: str
    team: Optional[str] = None  # Pro team abbreviation
    role: Optional[str] = None  # "SMG", "AR" or "Flex"
    average_draft_position: Optional[float] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict) -> "Player":
        adp = data.get("average_draft_position")
        return cls(
            player_id=str(data["player_id"]),
            gamer_tag=str(data["gamer_tag"]),
            team=data.get("team"),
            role=data.get("role"),
            average_draft_position=float(adp) if adp is not None else None,
            is_active=bool(data.get("is_active", True)),
        )


def draft_order_key(player: Player):
    """Ascending ADP with unset ADP last, then gamer tag."""
    adp = player.average_draft_position
    return (
        adp is None,
        adp if adp is not None else 0.0,
        player.gamer_tag.lower(),
        player.gamer_tag,
    )


class PlayerCatalog:
    """In-memory player catalog. Read-only from the draft engine's side."""

    def __init__(self, players: Optional[Iterable[Player]] = None):
        self._players: Dict[str, Player] = {}
        self._lock = threading.Lock()
        if players:
            self.add_players(players)

    def add_players(self, players: Iterable[Player]):
        with self._lock:
            for player in players:
                if player.player_id in self._players:
                    logger.warning(
                        "Replacing catalog entry for player %s", player.player_id
                    )
                self._players[player.player_id] = player

    def get_player(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def list_available_players(self, exclude_ids: Iterable[str] = ()) -> List[Player]:
        """Active players not in ``exclude_ids``, best ADP first."""
        excluded = set(exclude_ids)
        with self._lock:
            candidates = [
                p
                for p in self._players.values()
                if p.is_active and p.player_id not in excluded
            ]
        return sorted(candidates, key=draft_order_key)

    def __len__(self) -> int:
        return len(self._players)
