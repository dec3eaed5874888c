"""flowbuddy -- Ambient focus assistant core.

This package implements the orchestration layer of a desktop focus
assistant: a periodic screen monitor that flags distractions, an intake
pipeline that classifies offloaded thoughts and optionally researches
them, and a focus-transfer state machine for the transient capture
surface.
"""

__version__ = "0.1.0"
