"""Core services: scheduler state machine, tick clock, event bus, session wiring.

Import concrete classes from their modules (e.g.
``flowfit.core.scheduler.WorkoutScheduler``); this package init stays
import-free so the backend and config packages can depend on
``flowfit.core.interfaces`` without cycles.
"""
