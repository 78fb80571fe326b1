from sqlalchemy import Column, String, Integer, Text, CheckConstraint

from models.base_model import BaseModel, Base


class Game(BaseModel, Base):
    __tablename__ = "games"

    game_name = Column(String(128), nullable=False, unique=True, index=True)
    game_description = Column(Text, nullable=False)
    no_of_players_required = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("no_of_players_required >= 1", name="ck_games_players_positive"),
    )
