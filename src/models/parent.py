from sqlalchemy import Column, ForeignKey, String
from .base import Base


class ParentModel(Base):
    __tablename__ = "parents"

    user_id = Column(String, ForeignKey("users.user_id"), primary_key=True, index=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=False)
    address = Column(String, nullable=False)
