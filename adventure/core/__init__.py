"""Core progression primitives (eligibility, selection, player state, choices).

Kept free of FastAPI and redis concerns so the engine can be driven by API routes, scripts, and tests.
"""
