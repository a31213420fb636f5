import asyncio
from collections import OrderedDict
from typing import Dict, Iterable, List

from flask import current_app


def combine_scores(judgements: Iterable) -> Dict[str, int]:
    """Sum each player's per-question final scores.

    Judgements are de-duplicated by id first (last one wins) so a re-run
    never double counts.
    """
    unique = OrderedDict()
    for judgement in judgements:
        unique[judgement.id] = judgement
    totals: Dict[str, int] = {}
    for judgement in unique.values():
        totals[judgement.player_id] = totals.get(judgement.player_id, 0) + int(judgement.total_score)
    return totals


async def _apply_player_total(players, game_id, player_id, total, theme_name):
    try:
        player = players.get(game_id, player_id)
        if player is None:
            current_app.logger.warning(f"[scores] player={player_id} not found in game={game_id}, skipping")
            return None
        players.set_total_score(player, total, theme_name)
        current_app.logger.info(f"[scores] game={game_id} player={player_id} total={total}")
        return player_id
    except Exception as exc:
        current_app.logger.error(f"[scores] error updating player={player_id} game={game_id}: {exc}")
        return None


async def apply_player_totals(game_id, totals: Dict[str, int], theme_name, *, players) -> List[str]:
    """Write every player's combined total; one player's failure never blocks the rest.

    Returns the ids of players that were actually updated.
    """
    theme_name = theme_name or 'Unknown Theme'
    results = await asyncio.gather(*[
        _apply_player_total(players, game_id, player_id, total, theme_name)
        for player_id, total in totals.items()
    ])
    return [player_id for player_id in results if player_id is not None]


async def aggregate_scores(game_id, judgements, theme_name, *, players) -> List[str]:
    totals = combine_scores(judgements)
    return await apply_player_totals(game_id, totals, theme_name, players=players)
