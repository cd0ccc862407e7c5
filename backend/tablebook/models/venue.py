"""
Venue and per-venue settings tables.

Key design decisions:
- Venue ids are assigned by the application (max + 1), matching the
  memory backend, so both backends number venues identically
- Settings live in their own row keyed by venue id; the three override maps
  are JSON columns replaced wholesale on every save
"""

from sqlalchemy import Column, Integer, String, Float, Text, JSON, ForeignKey, CheckConstraint, Index

from tablebook.db.base import Base, TimestampMixin


class VenueORM(Base, TimestampMixin):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False, default="")
    phone = Column(String(50), nullable=True)
    capacity = Column(Integer, nullable=False, default=0)
    image = Column(Text, nullable=False, default="")
    cuisine = Column(String(100), nullable=False, default="")
    rating = Column(Float, nullable=False, default=0.0)
    reviews = Column(Integer, nullable=False, default=0)
    price_range = Column(String(20), nullable=False, default="")
    hours = Column(String(255), nullable=False, default="")
    website = Column(String(255), nullable=True)
    description = Column(Text, nullable=False, default="")

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="check_venue_capacity_non_negative"),
        # Discovery filters by cuisine and price tier
        Index("ix_venues_cuisine_price", "cuisine", "price_range"),
    )

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name}, capacity={self.capacity})>"


class VenueSettingsORM(Base, TimestampMixin):
    __tablename__ = "venue_settings"

    venue_id = Column(Integer, ForeignKey("venues.id"), primary_key=True)
    unavailable_dates = Column(JSON, nullable=False, default=list)
    daily_capacity = Column(JSON, nullable=False, default=dict)
    available_time_slots = Column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<VenueSettings(venue_id={self.venue_id}, closed={len(self.unavailable_dates or [])})>"
