from datetime import datetime, timezone
import uuid

from promptquiz import db


GAME_STATUSES = ('waiting', 'in_progress', 'judged')


def utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class Judge(db.Model):
    """A judge profile: theme, scoring assistant and its question pool."""
    __tablename__ = 'judge'
    id = db.Column(db.Integer, primary_key=True)
    theme = db.Column(db.String(64), nullable=False, index=True)
    assistant_id = db.Column(db.String(128), nullable=False)
    questions = db.relationship('JudgeQuestion', back_populates='judge', order_by='JudgeQuestion.id')

    def to_dict(self):
        return {
            'id': self.id,
            'theme': self.theme,
            'assistantId': self.assistant_id,
            'questions': [q.to_dict() for q in self.questions],
        }


class JudgeQuestion(db.Model):
    __tablename__ = 'judge_question'
    id = db.Column(db.String(64), primary_key=True)
    judge_id = db.Column(db.Integer, db.ForeignKey('judge.id'), nullable=False)
    content = db.Column(db.Text, nullable=False)
    judge = db.relationship('Judge', back_populates='questions')

    def to_dict(self):
        return {'id': self.id, 'content': self.content}


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    status = db.Column(db.String(32), default='waiting', nullable=False)  # waiting, in_progress, judged
    judge_id = db.Column(db.Integer, db.ForeignKey('judge.id'), nullable=True)
    # Denormalized from the judge so a game keeps its profile if the catalogue changes
    theme = db.Column(db.String(64), nullable=True)
    assistant_id = db.Column(db.String(128), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    questions = db.relationship('GameQuestion', back_populates='game', order_by='GameQuestion.position')
    players = db.relationship('Player', back_populates='game', order_by='Player.joined_at')
    answers = db.relationship('Answer', back_populates='game', order_by='Answer.id')
    judgements = db.relationship('Judgement', back_populates='game', order_by='Judgement.id')

    def judge_profile(self):
        return {
            'theme': self.theme,
            'assistantId': self.assistant_id,
            'questions': [q.to_dict() for q in self.questions],
        }

    def to_dict(self, include_results=True):
        data = {
            'id': self.id,
            'status': self.status,
            'theme': self.theme,
            'judge': self.judge_profile(),
            'players': [p.to_dict() for p in self.players],
        }
        if include_results:
            data['aiResponses'] = [a.to_dict() for a in self.answers]
            data['judgements'] = [j.to_dict() for j in self.judgements]
        return data


class GameQuestion(db.Model):
    """A judge question drawn into one game. Never changes after selection."""
    __tablename__ = 'game_question'
    game_id = db.Column(db.String(36), db.ForeignKey('game.id'), primary_key=True)
    question_id = db.Column(db.String(64), primary_key=True)
    content = db.Column(db.Text, nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    game = db.relationship('Game', back_populates='questions')

    def to_dict(self):
        return {'id': self.question_id, 'content': self.content}


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.String(64), primary_key=True)
    game_id = db.Column(db.String(36), db.ForeignKey('game.id'), primary_key=True)
    screen_name = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(256), nullable=True)
    prompt = db.Column(db.Text, nullable=True)
    # Written only by score aggregation
    total_score = db.Column(db.Integer, nullable=True, index=True)
    theme_name = db.Column(db.String(64), nullable=True)
    joined_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    game = db.relationship('Game', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'screenName': self.screen_name,
            'email': self.email,
            'prompt': self.prompt,
            'totalScore': self.total_score,
            'themeName': self.theme_name,
        }


def answer_key(game_id, player_id, question_id):
    return f"{game_id}-{player_id}-{question_id}"


def judgement_key(game_id, answer_id):
    return f"{game_id}-judge-{answer_id}"


class Answer(db.Model):
    __tablename__ = 'answer'
    id = db.Column(db.String(256), primary_key=True)
    game_id = db.Column(db.String(36), db.ForeignKey('game.id'), nullable=False, index=True)
    player_id = db.Column(db.String(64), nullable=False)
    player_name = db.Column(db.String(64), nullable=True)
    question_id = db.Column(db.String(64), nullable=False)
    question = db.Column(db.Text, nullable=False)
    assistant_prompt = db.Column(db.Text, nullable=True)
    answer = db.Column(db.Text, nullable=False, default='')
    timestamp = db.Column(db.DateTime(timezone=True), default=utcnow)
    game = db.relationship('Game', back_populates='answers')

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'playerId': self.player_id,
            'playerName': self.player_name,
            'questionId': self.question_id,
            'question': self.question,
            'assistantPrompt': self.assistant_prompt,
            'answer': self.answer,
            'timestamp': _iso(self.timestamp),
        }


class Judgement(db.Model):
    __tablename__ = 'judgement'
    id = db.Column(db.String(300), primary_key=True)
    game_id = db.Column(db.String(36), db.ForeignKey('game.id'), nullable=False, index=True)
    ai_answer_id = db.Column(db.String(256), nullable=False)
    player_id = db.Column(db.String(64), nullable=False)
    player_name = db.Column(db.String(64), nullable=True)
    question_id = db.Column(db.String(64), nullable=False)
    context_score = db.Column(db.Integer, nullable=False)
    technical_score = db.Column(db.Integer, nullable=False)
    clarity_score = db.Column(db.Integer, nullable=False)
    total_score = db.Column(db.Integer, nullable=False)
    justification = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime(timezone=True), default=utcnow)
    game = db.relationship('Game', back_populates='judgements')

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'aiAnswerId': self.ai_answer_id,
            'playerId': self.player_id,
            'playerName': self.player_name,
            'questionId': self.question_id,
            'contextScore': self.context_score,
            'technicalScore': self.technical_score,
            'clarityScore': self.clarity_score,
            'totalScore': self.total_score,
            'justification': self.justification,
            'timestamp': _iso(self.timestamp),
        }
