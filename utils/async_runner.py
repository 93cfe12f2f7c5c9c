"""
Bridge between Streamlit's synchronous script runs and the async ledger store.

All coroutines run on one long-lived event loop in a background thread, so
loop-bound resources (the async Supabase client and its connection pool)
are created once and reused across reruns.
"""

import asyncio
import threading

_loop = None
_lock = threading.Lock()

def get_event_loop() -> asyncio.AbstractEventLoop:
    """Return the shared background loop, starting it on first use."""
    global _loop
    with _lock:
        if _loop is None or _loop.is_closed():
            _loop = asyncio.new_event_loop()
            threading.Thread(target=_loop.run_forever, name="ledger-event-loop", daemon=True).start()
    return _loop

def run_async(coro):
    """Run a coroutine on the shared loop and block until it returns its result."""
    return asyncio.run_coroutine_threadsafe(coro, get_event_loop()).result()
