import uuid

from sqlalchemy import Column, String, Uuid

from marketplace_messaging.database import Base
from marketplace_messaging.models.db.timestamps import UTCDateTime, utcnow


class UserModel(Base):
    """SQLAlchemy model for users table.

    Users are owned by the identity provider; this service only reads them.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    avatar = Column(String(1024))
    created_at = Column(UTCDateTime, default=utcnow)
