from sqlalchemy import Column, Date, ForeignKey, Integer, String
from .base import Base


class StudentModel(Base):
    __tablename__ = "students"

    user_id = Column(String, ForeignKey("users.user_id"), primary_key=True, index=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=False)
    sex = Column(String, nullable=False)
    birthday = Column(Date, nullable=False)
    parent_id = Column(String, ForeignKey("parents.user_id"), nullable=False, index=True)
    class_id = Column(Integer, nullable=False)
    grade_id = Column(Integer, nullable=False)
