from conference_schedule.sources.devcon_api import fetch_sessions, parse_sessions

__all__ = ["fetch_sessions", "parse_sessions"]
