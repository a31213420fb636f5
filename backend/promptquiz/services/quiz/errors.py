class QuizError(Exception):
    """Base class for pipeline errors."""


# ---- Input errors: reported to the client, never retried ----

class PipelineInputError(QuizError):
    status_code = 400


class GameNotFoundError(PipelineInputError):
    status_code = 404

    def __init__(self, game_id):
        super().__init__('Game not found')
        self.game_id = game_id


class NoQuestionsError(PipelineInputError):
    status_code = 404

    def __init__(self, game_id):
        super().__init__('No judge questions found')
        self.game_id = game_id


class NoPlayersError(PipelineInputError):
    status_code = 404

    def __init__(self, game_id):
        super().__init__('No players found for this game')
        self.game_id = game_id


class NoAnswersError(PipelineInputError):
    status_code = 404

    def __init__(self, game_id):
        super().__init__('No AI responses found for judgement')
        self.game_id = game_id


class InvalidGameStateError(PipelineInputError):
    status_code = 409

    def __init__(self, game_id, status, action):
        super().__init__(f"Cannot {action} for a game in status '{status}'")
        self.game_id = game_id
        self.status = status


# ---- Judge run lifecycle faults ----

class JudgeRunError(QuizError):
    pass


class RunTerminatedError(JudgeRunError):
    def __init__(self, status, detail=None):
        message = f"Run {status}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status = status
        self.detail = detail


class UnsupportedRunStateError(JudgeRunError):
    def __init__(self, status):
        super().__init__(f"Run {status} - not supported")
        self.status = status


class RunTimeoutError(JudgeRunError):
    def __init__(self, attempts):
        super().__init__(f"Run timed out after {attempts} poll attempts")
        self.attempts = attempts


class EmptyResponseError(JudgeRunError):
    def __init__(self):
        super().__init__('No messages found in thread')


class MissingTextContentError(JudgeRunError):
    def __init__(self):
        super().__init__('No text content found in assistant response')


class ResponseParseError(QuizError):
    """The judge's reply had no recognisable form for ``field``."""

    def __init__(self, field):
        super().__init__(f"Could not parse {field}")
        self.field = field


class JudgementFailed(QuizError):
    """Any fault while judging one answer, tagged with that answer's id."""

    def __init__(self, answer_id, cause):
        super().__init__(f"Judging answer {answer_id} failed: {cause}")
        self.answer_id = answer_id
        self.cause = cause


class NoJudgesError(PipelineInputError):
    status_code = 404

    def __init__(self):
        super().__init__('No judges found in the database')


class PlayerNotFoundError(PipelineInputError):
    status_code = 404

    def __init__(self, game_id, player_id):
        super().__init__('Player not found')
        self.game_id = game_id
        self.player_id = player_id
