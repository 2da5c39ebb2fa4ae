"""Auto-pick selection for teams whose pick timer expired."""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional

from src.draft_room.models import DraftSession, Player
from src.player_pool.rankings import rank_players

logger = logging.getLogger(__name__)


class AutoPickSelector:
    """Deterministic best-available selection.

    Ranks undrafted players by projected points (ties broken by player ID)
    and returns the best one that fills an unmet roster need, if the league
    configures needs and the team still has one. Injury status does not
    change the ranking; inactive players are never picked.
    """

    def __init__(
        self,
        scoring_weights: Mapping[str, float],
        roster_needs: Optional[Mapping[str, int]] = None,
    ):
        self.scoring_weights = scoring_weights
        self.roster_needs = dict(roster_needs or {})

    def unmet_needs(self, team_players: Iterable[Player]) -> Dict[str, int]:
        """Positions the team still needs, with how many are missing."""
        counts = Counter(p.position for p in team_players)
        return {
            position: required - counts[position]
            for position, required in self.roster_needs.items()
            if counts[position] < required
        }

    def select(
        self,
        available_players: Iterable[Player],
        team_players: Iterable[Player] = (),
    ) -> Optional[Player]:
        """Pick a player from *available_players*, or None if none qualify.

        Args:
            available_players: Undrafted players in the pool.
            team_players: Players the team on the clock already drafted.
        """
        candidates = [p for p in available_players if p.is_active]
        if not candidates:
            return None

        by_id = {p.player_id: p for p in candidates}
        ranked = rank_players(candidates, self.scoring_weights)

        needs = self.unmet_needs(team_players)
        if needs:
            matching = ranked.loc[ranked["position"].isin(list(needs))]
            if not matching.empty:
                return by_id[matching.iloc[0]["player_id"]]
            logger.info(
                "No available player fills needs %s; taking best available", needs
            )

        return by_id[ranked.iloc[0]["player_id"]]

    def select_for_session(
        self, session: DraftSession, players: List[Player]
    ) -> Optional[Player]:
        """Select for the team on the clock in *session*."""
        slot = session.next_slot
        if slot is None:
            return None
        drafted = session.drafted_player_ids
        by_id = {p.player_id: p for p in players}
        team_players = [
            by_id[pick.player_id]
            for pick in session.picks_for_team(slot.team_id)
            if pick.player_id in by_id
        ]
        available = [p for p in players if p.player_id not in drafted]
        return self.select(available, team_players)
