"""Game domain services: session engine, scoring, persistence and timers.

This package contains the game mechanics imported by HTTP routes and the
scheduler, keeping transport concerns separated from the session rules.
"""
