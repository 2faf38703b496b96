"""Order store port and its Protean repository adapter.

The store is the transaction boundary of a checkout: ``save()`` commits the
Order together with its lines and payment in a single unit of work, or
raises and leaves nothing behind.
"""

import os
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from contextlib import contextmanager

import structlog
from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError

from ordering.checkout.errors import PersistenceFailure, PersistenceTimeout
from ordering.order.order import Order

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = float(os.environ.get("ORDER_STORE_TIMEOUT_SECONDS", "5"))


class OrderStore(ABC):
    """Durable storage for Order aggregates."""

    @abstractmethod
    def save(self, order: Order) -> Order:
        """Persist the whole aggregate atomically and return it."""
        ...

    @abstractmethod
    def find_by_id(self, order_id: str) -> Order | None:
        """Return a previously saved order, or None."""
        ...


class CommitAbandoned(Exception):
    """Raised on the commit thread when ``save()`` has already given up."""


class _CommitGate:
    """Lets exactly one of committing and abandoning win for a single save."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.abandoned = False
        self.committed = False

    @contextmanager
    def committing(self):
        with self._lock:
            if self.abandoned:
                raise CommitAbandoned()
            yield
            self.committed = True

    def abandon(self) -> bool:
        """Abandon the commit unless it already landed. Returns True if abandoned."""
        with self._lock:
            if not self.committed:
                self.abandoned = True
            return self.abandoned


class RepositoryOrderStore(OrderStore):
    """Saves orders through the domain's Order repository.

    The commit runs on a worker thread with its own domain context so that
    it can be bounded by ``timeout`` seconds. When the timeout passes first,
    the unit of work is rolled back instead of committed and PersistenceTimeout
    is raised, so a retry cannot produce a second order. A commit already
    underway when the timeout passes is waited for and its order returned.
    """

    def __init__(self, domain, timeout: float | None = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.domain = domain
        self.timeout = timeout

    def _commit(self, order: Order, gate: _CommitGate) -> Order:
        with self.domain.domain_context():
            uow = UnitOfWork()
            uow.start()
            try:
                self.domain.repository_for(Order).add(order)
                with gate.committing():
                    uow.commit()
            except CommitAbandoned:
                uow.rollback()
                logger.info("Abandoned order commit rolled back", order_id=str(order.id))
                raise
            except Exception:
                if uow.in_progress:
                    uow.rollback()
                raise
        return order

    def save(self, order: Order) -> Order:
        gate = _CommitGate()
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="order-store")
        future = pool.submit(self._commit, order, gate)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError as exc:
            if not gate.abandon():
                logger.warning("Order commit finished as the timeout passed", order_id=str(order.id), timeout=self.timeout)
                return order
            logger.error("Order commit timed out", order_id=str(order.id), timeout=self.timeout)
            raise PersistenceTimeout(
                f"Order {order.id} was not committed within {self.timeout}s", order_id=str(order.id)
            ) from exc
        except Exception as exc:
            logger.error("Order commit failed", order_id=str(order.id), error=str(exc))
            raise PersistenceFailure(f"Order {order.id} could not be committed: {exc}", order_id=str(order.id)) from exc
        finally:
            pool.shutdown(wait=False)

    def find_by_id(self, order_id: str) -> Order | None:
        try:
            return self.domain.repository_for(Order).get(order_id)
        except ObjectNotFoundError:
            return None
