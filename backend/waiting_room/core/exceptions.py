class WaitingRoomError(Exception):
    """
    Base exception for errors surfaced to API callers.
    """
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class QueueStoreUnavailableError(WaitingRoomError):
    """
    The backing queue store could not be reached or timed out.
    Transient: callers should try again shortly. Nothing is retried server-side.
    """
    def __init__(self, message: str = "Queue store unavailable. Please try again shortly.", status_code: int = 503):
        super().__init__(message, status_code)
