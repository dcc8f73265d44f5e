"""
Quiz Event Logger - Logs session lifecycle and integrity events
"""

import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


def log_quiz_event(
    session_id: str,
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
    level: str = "info"
):
    """
    Log a quiz session event.
    
    Args:
        session_id: Quiz session ID
        event_type: Type of event (session_start, violation, session_end, etc.)
        details: Optional event details
        level: Log level (debug, info, warning, error)
    """
    message = f"[QUIZ] session={session_id} event={event_type}"
    
    if details:
        detail_str = " ".join(f"{k}={v}" for k, v in details.items())
        message += f" {detail_str}"
    
    if level == "debug":
        logger.debug(message)
    elif level == "warning":
        logger.warning(message)
    elif level == "error":
        logger.error(message)
    else:
        logger.info(message)


def log_session_start(session_id: str, question_count: int, duration_seconds: int):
    """Log session start event"""
    log_quiz_event(
        session_id=session_id,
        event_type="session_start",
        details={
            "questions": question_count,
            "duration_s": duration_seconds
        }
    )


def log_session_end(session_id: str, score: int, total: int, terminated_by: str, violations: int):
    """Log session end event"""
    log_quiz_event(
        session_id=session_id,
        event_type="session_end",
        details={
            "score": f"{score}/{total}",
            "terminated_by": terminated_by,
            "violations": violations
        }
    )


def log_violation(session_id: str, kind: str, severity: str, detail: Optional[str] = None):
    """Log a recorded integrity violation"""
    details = {"kind": kind, "severity": severity}
    if detail:
        details["detail"] = detail
    log_quiz_event(
        session_id=session_id,
        event_type="violation",
        details=details,
        level="info" if severity == "info" else "warning"
    )


def log_critical_event(session_id: str, event: str, details: Optional[Dict[str, Any]] = None):
    """Log a critical quiz event (forced termination)"""
    log_quiz_event(
        session_id=session_id,
        event_type=f"critical_{event}",
        details=details,
        level="warning"
    )
