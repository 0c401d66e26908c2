from typing import Dict, List, Mapping, Optional
import logging

from ..models.api import (
    AddSessionRequest,
    AddSessionResponse,
    CleanResponse,
    CountsResponse,
    RemoveSessionRequest,
    SessionResult,
)
from ..sessions.registry import SessionRegistry
from ..utils.cookies import parse_cookie_header
from ..utils.urls import normalize_broker_url
from ..utils.validation import validate_session_id

logger = logging.getLogger(__name__)

ADDED = "added"
ALREADY_EXISTS = "already exists"
REMOVED = "removed"
NOT_EXISTS = "not exists"


class ValidationFailure(ValueError):
    """Request rejected before touching the registry."""


class ControlService:
    """
    Translates control requests into registry operations.

    Validation happens here, before the registry is touched: a rejected
    request never creates or removes a session.
    """

    def __init__(self, registry: SessionRegistry, default_broker_url: str = ""):
        self.registry = registry
        self.default_broker_url = default_broker_url

    def add_sessions(
        self,
        request: AddSessionRequest,
        request_cookies: Optional[Mapping[str, str]] = None,
    ) -> AddSessionResponse:
        """
        Add one session, or ``many`` sessions with ids "0".."many-1".
        Bulk add is best-effort: each id gets its own result.
        """
        if not request.id and request.many == 0:
            raise ValidationFailure("User ID is not specified")
        if request.many == 0 and not validate_session_id(request.id):
            raise ValidationFailure(f"Invalid user ID: {request.id!r}")

        raw_url = request.centrifugo_url or self.default_broker_url
        if not raw_url:
            raise ValidationFailure("Centrifugo Url is not specified")
        try:
            broker_url = normalize_broker_url(raw_url)
        except ValueError as e:
            raise ValidationFailure(str(e)) from e

        cookies: Dict[str, str] = dict(request_cookies or {})
        if request.cookie:
            cookies = parse_cookie_header(request.cookie)
        if not cookies:
            raise ValidationFailure("Cookies not found")

        if request.many > 0:
            session_ids = [str(i) for i in range(request.many)]
        else:
            session_ids = [request.id]

        results: List[SessionResult] = []
        for session_id in session_ids:
            if self.registry.add(session_id, broker_url, cookies):
                status, detail = ADDED, f"added to {broker_url}"
            else:
                status, detail = ALREADY_EXISTS, ALREADY_EXISTS
            message = f"User {session_id} is {detail}"
            logger.info(message)
            results.append(SessionResult(id=session_id, status=status, message=message))

        return AddSessionResponse(results=results)

    def remove_session(self, request: RemoveSessionRequest) -> SessionResult:
        if not request.id:
            raise ValidationFailure("User ID is not specified")

        status = REMOVED if self.registry.remove(request.id) else NOT_EXISTS
        message = f"User {request.id} is {status}"
        logger.info(message)
        return SessionResult(id=request.id, status=status, message=message)

    def remove_all(self) -> CleanResponse:
        removed = self.registry.remove_all()
        logger.info("Users clean")
        return CleanResponse(removed=removed)

    def get_counts(self) -> CountsResponse:
        counters = self.registry.get_counters()
        return CountsResponse(
            total=counters.total,
            connected=counters.connected,
            subscribed=counters.subscribed,
        )
