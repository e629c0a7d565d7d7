"""
This file contains custom, application-specific exceptions.
"""

class MeetingCreationError(Exception):
    """Raised when the meeting provider could not create a joinable meeting."""
    pass
