"""
Storage interfaces for dependency inversion.
Allows swapping backends without changing business logic.
"""

from .storage import (
    ReservationRepository,
    SettingsRepository,
    Storage,
    UserRepository,
    VenueRepository,
)

__all__ = [
    'ReservationRepository', 'SettingsRepository', 'Storage',
    'UserRepository', 'VenueRepository',
]
