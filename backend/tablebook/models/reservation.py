"""
Reservation table.

Key design decisions:
- venue_id and user_id are plain indexed columns, not foreign keys:
  reservations outlive the venue and user rows they point at
- Composite index on (venue_id, date, status) serves the confirmed
  party-size SUM behind every remaining-capacity computation
- confirmation_number is indexed but not unique: codes are short and
  may repeat, lookups return the earliest match
- Status changes are validated in the service layer; the CHECK constraint
  only guards against unknown values
"""

from sqlalchemy import Column, Integer, String, CheckConstraint, Index

from tablebook.db.base import Base, TimestampMixin


class ReservationORM(Base, TimestampMixin):
    __tablename__ = "reservations"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    venue_id = Column(Integer, nullable=False, index=True)
    venue_name = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)
    time = Column(String(5), nullable=False)
    party_size = Column(Integer, nullable=False)
    guest_name = Column(String(100), nullable=False)
    guest_phone = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    mode = Column(String(20), nullable=False, default="scheduled")
    confirmation_number = Column(String(32), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("party_size > 0", name="check_reservation_party_size_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'rejected')",
            name="check_reservation_status",
        ),
        CheckConstraint("mode IN ('instant', 'scheduled')", name="check_reservation_mode"),
        Index("ix_reservations_venue_date_status", "venue_id", "date", "status"),
    )

    def __repr__(self) -> str:
        return f"<Reservation(id={self.id}, venue={self.venue_id}, date={self.date}, status={self.status})>"
