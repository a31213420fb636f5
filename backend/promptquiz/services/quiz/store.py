"""Thin stores over the SQLAlchemy session.

The pipeline only talks to these, so a test or another backend can swap
them out. Writes commit immediately and roll back on failure before
re-raising.
"""

from typing import Iterable, List, Optional

from promptquiz.models import Answer, Game, Judgement, Player


class GameStore:
    def __init__(self, session):
        self.session = session

    def get(self, game_id: str) -> Optional[Game]:
        return self.session.get(Game, game_id)

    def list_answers(self, game_id: str) -> List[Answer]:
        return Answer.query.filter_by(game_id=game_id).order_by(Answer.id).all()

    def list_judgements(self, game_id: str) -> List[Judgement]:
        return Judgement.query.filter_by(game_id=game_id).order_by(Judgement.id).all()

    def save_answers(self, game_id: str, answers: Iterable[Answer]) -> int:
        """Upsert answers by their natural id."""
        return self._upsert(game_id, answers)

    def save_judgements(self, game_id: str, judgements: Iterable[Judgement]) -> int:
        """Upsert judgements by their natural id, so a re-run replaces rather than appends."""
        return self._upsert(game_id, judgements)

    def set_status(self, game_id: str, status: str) -> None:
        game = self.get(game_id)
        if game is None or game.status == status:
            return
        game.status = status
        self._commit()

    def _upsert(self, game_id, rows) -> int:
        count = 0
        for row in rows:
            row.game_id = game_id
            self.session.merge(row)
            count += 1
        self._commit()
        return count

    def _commit(self):
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise


class PlayerStore:
    def __init__(self, session):
        self.session = session

    def get(self, game_id: str, player_id: str) -> Optional[Player]:
        return self.session.get(Player, (player_id, game_id))

    def list_for_game(self, game_id: str) -> List[Player]:
        return Player.query.filter_by(game_id=game_id).order_by(Player.joined_at).all()

    def set_total_score(self, player: Player, total_score: int, theme_name: str) -> None:
        player.total_score = total_score
        player.theme_name = theme_name
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
