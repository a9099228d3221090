"""Game domain services: roles and scoring, session registry, round lifecycle.

This package contains the game mechanics imported by the Socket.IO handlers
and the HTTP blueprint, keeping transport concerns separated from the core
state machine.
"""
