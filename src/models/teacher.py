from sqlalchemy import JSON, Column, Date, ForeignKey, String
from .base import Base


class TeacherModel(Base):
    __tablename__ = "teachers"

    user_id = Column(String, ForeignKey("users.user_id"), primary_key=True, index=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=False)
    sex = Column(String, nullable=False)  # 'MALE' or 'FEMALE'
    birthday = Column(Date, nullable=False)
    subjects = Column(JSON, default=list)  # subject ids, assigned by admin later
