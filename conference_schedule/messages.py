UPDATE_TITLE = "Schedule Updated"

ADDED_LINE = "• {count} new sessions added"
MODIFIED_LINE = "• {count} sessions modified"
REMOVED_LINE = "• {count} sessions removed"
UNCHANGED_LINE = "• {count} sessions unchanged"
NO_CHANGES_LINE = "No changes found in the schedule"

NO_SESSIONS_MESSAGE = "No sessions found"
REFRESH_FAILED_MESSAGE = "Could not refresh the schedule. Showing the last loaded sessions."
REFRESH_SKIPPED_MESSAGE = "A refresh is already running."
