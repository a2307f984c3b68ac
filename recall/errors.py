class RecallError(Exception):
    """Base class for errors raised by the review engine."""


class InvalidRating(RecallError, ValueError):
    def __init__(self, quality):
        super().__init__(f"Quality must be an integer between 0 and 5, got {quality!r}")
        self.quality = quality


class InvalidTransition(RecallError):
    def __init__(self, event: str, phase: str):
        super().__init__(f"Cannot {event} while session is {phase}")
        self.event = event
        self.phase = phase


class PersistenceFailure(RecallError):
    def __init__(self, card_id: str, reason: str = ""):
        message = f"Could not persist card {card_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.card_id = card_id
