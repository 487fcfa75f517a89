from src.services import household_service


__all__ = [
    "household_service",
]
