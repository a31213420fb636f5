"""Prompt quiz pipeline: answer generation, judging and scoring.

Everything here works against injected handles (stores, model client,
notifier) so HTTP routes and socket handlers stay thin and the stages can
be driven directly from tests.
"""
