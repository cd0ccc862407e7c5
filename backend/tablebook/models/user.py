"""
User table. Passwords are stored as bcrypt hashes only.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint

from tablebook.db.base import Base, TimestampMixin


class UserORM(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    login_id = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, default="customer")
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=True)
    password_hash = Column(String(255), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('customer', 'restaurant_owner')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, login_id={self.login_id}, role={self.role})>"
