from space_reservations.models.user import User
from space_reservations.models.space import Space
from space_reservations.models.reservation import Reservation

__all__ = ["User", "Space", "Reservation"]
