"""Game domain services: outcome scoring, round timers and matchmaking.

This package contains the transport-free core that the Socket.IO handlers
call into, keeping connection concerns separated from round mechanics.
"""
