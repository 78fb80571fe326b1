from sqlalchemy import Column, String, Integer, Text

from models.base_model import Base, BaseModel


class User(BaseModel, Base):
    __tablename__ = "users"
    # always stored lowercased
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    # single slot: the only refresh token currently accepted for this user
    refresh_token = Column(Text, nullable=True)
    coins = Column(Integer, nullable=False, default=500)

    def __repr__(self):
        return f"<User username={self.username}>"
