"""Workbench tying search, both prediction models and persistence together."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from kcat_portal.core.errors import AuthExpired, AuthForbidden, PortalError
from kcat_portal.core.settings import get_settings
from kcat_portal.interfaces.schemas import (
    DisplayRecord,
    DLTKcatRequest,
    EnzymeRecord,
    PredictionResult,
    QueryFilter,
    UniKPRequest,
)
from kcat_portal.services.aggregator import merge
from kcat_portal.services.name_resolver import PubChemNameResolver
from kcat_portal.services.persistence import PersistenceGateway
from kcat_portal.services.prediction import DLTKcatAdapter, UniKPAdapter
from kcat_portal.services.query import QueryService
from kcat_portal.services.session import SessionStore
from kcat_portal.utils.logger import bound_operation, configure_logging, get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SEARCH = "search"
UNIKP = "unikp"
DLTKCAT = "dltkcat"
SAVE = "save"


@dataclass
class OperationState:
    in_progress: bool = False
    error: Optional[PortalError] = None
    results: List[Any] = field(default_factory=list)

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[PortalError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""


class KcatWorkbench:
    """Runs user actions and keeps one independent state slot per action.

    Operations return an `Outcome` rather than raising, so the caller decides
    how to present errors. A 401 anywhere schedules session teardown and a
    redirect to the login page after a short delay.
    """

    def __init__(
        self,
        session: SessionStore,
        *,
        query: Optional[QueryService] = None,
        unikp: Optional[UniKPAdapter] = None,
        dltkcat: Optional[DLTKcatAdapter] = None,
        persistence: Optional[PersistenceGateway] = None,
        redirect: Optional[Callable[[str], None]] = None,
        redirect_delay: Optional[float] = None,
        json_logs: bool = True,
    ) -> None:
        settings = get_settings()
        configure_logging(settings.app.log_level, json=json_logs)
        resolver = PubChemNameResolver()
        self._session = session
        self._query = query or QueryService(session)
        self._unikp = unikp or UniKPAdapter(resolver)
        self._dltkcat = dltkcat or DLTKcatAdapter(resolver)
        self._persistence = persistence or PersistenceGateway(session, resolver)
        self._redirect = redirect or _log_redirect
        self._redirect_delay = (
            redirect_delay
            if redirect_delay is not None
            else settings.auth.expired_redirect_delay_seconds
        )
        self._login_path = settings.auth.login_path
        self._teardown_task: Optional[asyncio.Task] = None
        self.states: Dict[str, OperationState] = {
            name: OperationState() for name in (SEARCH, UNIKP, DLTKCAT, SAVE)
        }

    @property
    def pending_teardown(self) -> Optional[asyncio.Task]:
        return self._teardown_task

    async def search(self, query: QueryFilter) -> Outcome[List[EnzymeRecord]]:
        return await self._run(SEARCH, lambda: self._query.search(query), list)

    async def predict_unikp(self, request: UniKPRequest) -> Outcome[PredictionResult]:
        return await self._run(UNIKP, lambda: self._unikp.predict(request), _single)

    async def predict_dltkcat(self, request: DLTKcatRequest) -> Outcome[PredictionResult]:
        return await self._run(DLTKCAT, lambda: self._dltkcat.predict(request), _single)

    async def predict_both(
        self, unikp_request: UniKPRequest, dltkcat_request: DLTKcatRequest
    ) -> Tuple[Outcome[PredictionResult], Outcome[PredictionResult]]:
        unikp_outcome, dltkcat_outcome = await asyncio.gather(
            self.predict_unikp(unikp_request),
            self.predict_dltkcat(dltkcat_request),
        )
        return unikp_outcome, dltkcat_outcome

    async def save(self, result: PredictionResult) -> Outcome[Any]:
        return await self._run(SAVE, lambda: self._persistence.save(result), _single)

    def merged_results(self) -> List[DisplayRecord]:
        return merge(
            self.states[SEARCH].results,
            self.states[UNIKP].results,
            self.states[DLTKCAT].results,
        )

    def logout(self) -> None:
        self._session.clear()
        self._redirect(self._login_path)

    async def _run(
        self,
        slot: str,
        operation: Callable[[], Awaitable[T]],
        to_results: Callable[[T], List[Any]],
    ) -> Outcome[T]:
        state = self.states[slot]
        state.in_progress = True
        state.error = None
        try:
            with bound_operation(operation=slot):
                value = await operation()
        except PortalError as exc:
            state.error = exc
            state.results = []
            self._handle_failure(slot, exc)
            return Outcome(error=exc)
        finally:
            state.in_progress = False
        state.results = to_results(value)
        return Outcome(value=value)

    def _handle_failure(self, slot: str, exc: PortalError) -> None:
        logger.warning(f"workbench.{slot}.failed", kind=exc.kind.value, error=exc.message)
        if isinstance(exc, AuthExpired):
            self._schedule_teardown()
        elif isinstance(exc, AuthForbidden):
            # Session stays; the user is logged in but lacks rights.
            logger.info("workbench.auth_forbidden", slot=slot)

    def _schedule_teardown(self) -> None:
        if self._teardown_task is not None and not self._teardown_task.done():
            return
        logger.info("workbench.auth_expired", delay=self._redirect_delay)
        self._teardown_task = asyncio.create_task(self._expire_session())

    async def _expire_session(self) -> None:
        await asyncio.sleep(self._redirect_delay)
        self.logout()


def _single(value: Any) -> List[Any]:
    return [value]


def _log_redirect(path: str) -> None:
    logger.info("workbench.redirect", path=path)


__all__ = ["KcatWorkbench", "OperationState", "Outcome"]
