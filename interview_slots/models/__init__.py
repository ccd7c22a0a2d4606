from .generated import AvailabilitySlots, Base, Interviewers, metadata

__all__ = ["AvailabilitySlots", "Base", "Interviewers", "metadata"]
