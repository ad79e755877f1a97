"""University subjects (e.g. CS301 Operating Systems). Static reference data, read-only here."""

from sqlalchemy import Column, Integer, String

from app.db.session import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
