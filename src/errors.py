"""Error type raised when a teardown step fails."""

STEP_PREFLIGHT = "preflight"
STEP_DEREGISTER = "deregister"
STEP_CLOSE = "close"
STEP_POLL = "poll"


class TeardownError(Exception):
    """A fatal failure in one step of the organization teardown."""

    def __init__(self, step, message):
        super().__init__(message)
        self.step = step
        self.message = message

    def __str__(self):
        return f"{self.step}: {self.message}"
