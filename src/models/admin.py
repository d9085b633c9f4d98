from sqlalchemy import Boolean, Column, ForeignKey, String
from .base import Base


class AdminModel(Base):
    __tablename__ = "admins"

    user_id = Column(String, ForeignKey("users.user_id"), primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    super_admin = Column(Boolean, nullable=False, default=False)  # may create other admins
