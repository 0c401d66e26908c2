def validate_session_id(session_id: str) -> bool:
    if not session_id or len(session_id) > 255:
        return False
    if any(ch.isspace() for ch in session_id):
        return False
    return True
