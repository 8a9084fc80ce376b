"""Plant Tracker — a small multi-tenant plant watering log.

Users register, log in with email/password, and keep track of their own
plants and when each was last watered. Every plant belongs to exactly one
user and is invisible to everyone else.
"""

__version__ = "0.1.0"
