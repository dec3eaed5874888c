"""Monitoring module for flowbuddy.

Public API:
    MonitoringScheduler -- Periodic, non-overlapping context checks
    SingleFlightRunner -- Single-slot task supervisor
"""

from flowbuddy.monitoring.scheduler import MonitoringScheduler
from flowbuddy.monitoring.supervisor import SingleFlightRunner

__all__ = ["MonitoringScheduler", "SingleFlightRunner"]
