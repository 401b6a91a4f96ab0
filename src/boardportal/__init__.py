"""
Board Portal Engine

Orchestration layer of the board management portal: meeting and task
mirrors kept live by the backend's change feed, meeting reminders,
notification read-state and the member directory.
"""

__version__ = "0.1.0"
