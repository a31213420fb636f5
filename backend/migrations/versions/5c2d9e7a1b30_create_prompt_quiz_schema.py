"""create judge, game, player, answer and judgement tables

Revision ID: 5c2d9e7a1b30
Revises:
Create Date: 2025-03-14 10:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d9e7a1b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'judge' not in existing_tables:
        op.create_table(
            'judge',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('theme', sa.String(length=64), nullable=False),
            sa.Column('assistant_id', sa.String(length=128), nullable=False),
        )
        op.create_index('ix_judge_theme', 'judge', ['theme'])

    if 'judge_question' not in existing_tables:
        op.create_table(
            'judge_question',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('judge_id', sa.Integer(), sa.ForeignKey('judge.id'), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
        )

    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('status', sa.String(length=32), nullable=False, server_default='waiting'),
            sa.Column('judge_id', sa.Integer(), sa.ForeignKey('judge.id'), nullable=True),
            sa.Column('theme', sa.String(length=64), nullable=True),
            sa.Column('assistant_id', sa.String(length=128), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        )

    if 'game_question' not in existing_tables:
        op.create_table(
            'game_question',
            sa.Column('game_id', sa.String(length=36), sa.ForeignKey('game.id'), primary_key=True),
            sa.Column('question_id', sa.String(length=64), primary_key=True),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        )

    if 'player' not in existing_tables:
        op.create_table(
            'player',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('game_id', sa.String(length=36), sa.ForeignKey('game.id'), primary_key=True),
            sa.Column('screen_name', sa.String(length=64), nullable=False),
            sa.Column('email', sa.String(length=256), nullable=True),
            sa.Column('prompt', sa.Text(), nullable=True),
            sa.Column('total_score', sa.Integer(), nullable=True),
            sa.Column('theme_name', sa.String(length=64), nullable=True),
            sa.Column('joined_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_player_total_score', 'player', ['total_score'])

    if 'answer' not in existing_tables:
        op.create_table(
            'answer',
            sa.Column('id', sa.String(length=256), primary_key=True),
            sa.Column('game_id', sa.String(length=36), sa.ForeignKey('game.id'), nullable=False),
            sa.Column('player_id', sa.String(length=64), nullable=False),
            sa.Column('player_name', sa.String(length=64), nullable=True),
            sa.Column('question_id', sa.String(length=64), nullable=False),
            sa.Column('question', sa.Text(), nullable=False),
            sa.Column('assistant_prompt', sa.Text(), nullable=True),
            sa.Column('answer', sa.Text(), nullable=False),
            sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_answer_game_id', 'answer', ['game_id'])

    if 'judgement' not in existing_tables:
        op.create_table(
            'judgement',
            sa.Column('id', sa.String(length=300), primary_key=True),
            sa.Column('game_id', sa.String(length=36), sa.ForeignKey('game.id'), nullable=False),
            sa.Column('ai_answer_id', sa.String(length=256), nullable=False),
            sa.Column('player_id', sa.String(length=64), nullable=False),
            sa.Column('player_name', sa.String(length=64), nullable=True),
            sa.Column('question_id', sa.String(length=64), nullable=False),
            sa.Column('context_score', sa.Integer(), nullable=False),
            sa.Column('technical_score', sa.Integer(), nullable=False),
            sa.Column('clarity_score', sa.Integer(), nullable=False),
            sa.Column('total_score', sa.Integer(), nullable=False),
            sa.Column('justification', sa.Text(), nullable=False),
            sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_judgement_game_id', 'judgement', ['game_id'])


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Children first to satisfy foreign keys
    for table in ('judgement', 'answer', 'player', 'game_question', 'game', 'judge_question', 'judge'):
        if table in existing_tables:
            op.drop_table(table)
