"""County Explorer application shell — settings, FastAPI app, routers."""
