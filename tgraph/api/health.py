"""Health check utilities."""

from pathlib import Path
from typing import Dict

from tgraph.services.session import SessionState, ViewerSession


def check_session(session: ViewerSession) -> Dict:
    """
    Check viewer session health.

    A missing source file is reported but does not make the service
    unhealthy: the session waits for data in the live state.

    Args:
        session: The session to inspect.

    Returns:
        Dictionary with overall status, session state and source details.
    """
    source = Path(session.config.log_file)
    status = "healthy" if session.state == SessionState.LIVE else "unhealthy"

    return {
        "status": status,
        "session": {
            "state": session.state.value,
            "metric": session.config.metric.value,
            "mode": session.config.retention.name,
            "samples": session.buffer.size(),
        },
        "source": {
            "path": str(source),
            "exists": source.exists(),
            "waiting_for_data": session.buffer.size() == 0,
        },
    }
