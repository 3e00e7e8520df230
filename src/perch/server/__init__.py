"""Server pipeline — ASGI boundary, dispatch, error handling, sending."""
