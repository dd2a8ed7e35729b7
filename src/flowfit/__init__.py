"""FlowFit — workplace movement reminders driven by a workout/break scheduler."""

__version__ = "0.3.0"
