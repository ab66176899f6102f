import time


def expiration_timestamp_millis(minutes=10, now=None):
    """Epoch milliseconds `minutes` from now (13 digits for near-future dates)."""
    if now is None:
        now = time.time()
    return int((now + minutes * 60) * 1000)
