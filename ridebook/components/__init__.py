from .ride_card import RideCard, StatusBadge

__all__ = ["RideCard", "StatusBadge"]
