import time


def current_millis() -> int:
    """Returns the current UTC time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000
