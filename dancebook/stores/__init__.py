# dancebook/stores/__init__.py

from .users import CredentialStore
from .catalog import CatalogStore
from .bookings import BookingLedger

__all__ = ['CredentialStore', 'CatalogStore', 'BookingLedger']
