"""Session data engine for a conference schedule: search, filters, day grouping and refresh diffs."""
