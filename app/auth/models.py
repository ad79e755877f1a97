from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class User(Base):
    """
    Profile row mirrored from the identity provider (id = provider user id).
    The provider creates and owns it; this service only reads it, e.g. for contributor names.
    """

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(String(255), nullable=True)
    full_name = Column(String(255), nullable=True)
    # student | faculty | admin
    role = Column(String(50), nullable=False, default="student")
