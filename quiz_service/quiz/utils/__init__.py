"""Quiz utilities"""

from .logging import log_quiz_event, log_session_start, log_session_end, log_violation, log_critical_event

__all__ = ["log_quiz_event", "log_session_start", "log_session_end", "log_violation", "log_critical_event"]
