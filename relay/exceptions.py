"""
Relay exceptions

Raised by the registry, handled by the session protocol layer
"""


class RelayError(Exception):
    """Base class for all relay errors"""
    pass


class RoomNotFound(RelayError):
    """No live room with this code"""
    def __init__(self, code):
        self.code = code
        super().__init__(f"Room {code} not found")


class CodeSpaceExhausted(RelayError):
    """Could not draw a free room code"""
    def __init__(self, attempts):
        self.attempts = attempts
        super().__init__(f"No free room code after {attempts} attempts")
