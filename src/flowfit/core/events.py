"""Well-known event type constants.

Defined centrally so publishers and subscribers reference the same strings.
"""

# --- Scheduler events ------------------------------------------------------

PHASE_CHANGED = "scheduler.phase.changed"
ACTIVITY_COMPLETED = "scheduler.activity.completed"
TIME_BLOCK_STARTED = "scheduler.time_block.started"
TIME_BLOCK_ENDED = "scheduler.time_block.ended"

# --- Side-effect requests ---------------------------------------------------

NOTIFICATION_REQUESTED = "output.notification.requested"

# --- Session lifecycle events ---------------------------------------------

SESSION_STARTED = "session.started"
USER_DATA_RELOADED = "session.user_data.reloaded"
SHUTDOWN_INITIATED = "session.shutdown.initiated"
