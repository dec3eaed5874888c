"""Observable session state shared by the monitor, intake and focus modules."""

from flowbuddy.state.session import SessionState

__all__ = ["SessionState"]
