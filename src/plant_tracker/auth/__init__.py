"""Authentication and authorization.

Users authenticate with email/password and receive a signed JWT whose
subject is their email. Every protected request presents that token as
a Bearer credential; the resolved email is the only identity that the
plant routes trust.
"""
