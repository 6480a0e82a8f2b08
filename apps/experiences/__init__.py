"""Experiences catalogue: short guided activities bookable by guests."""
