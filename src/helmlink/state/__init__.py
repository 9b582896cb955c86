"""State layer.

This package owns the geometric model of the vehicle and its contacts and
the notifications emitted when that model changes.
"""
