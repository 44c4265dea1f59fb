"""
Utility helpers for the client shell (validation, time, caching).
"""
