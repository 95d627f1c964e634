"""
Reconcile loop driving update passes for consensus-set components.

Component keys are queued by whatever watches the backing store. A pool
of workers pulls keys and runs one pass each:

    enqueue(key) -> queue -> worker -> handler.handle(key)
                                        |-> done: forget backoff
                                        |-> not done: reset backoff, requeue after delay
                                        '-> raised: requeue after backoff

A key is never processed by two workers at once. Enqueueing a key that
is already queued is a no-op, and enqueueing one that is being processed
marks it dirty so it is queued again as soon as its pass ends.
"""

import asyncio
from typing import TYPE_CHECKING, Protocol

from consensus_operator.consensus.models import ComponentKey, UpdatePassResult
from consensus_operator.errors import ConsensusOperatorError
from consensus_operator.reliability import Backoff, RetryConfig

from .logging_models import ControllerDebug, ControllerError, ControllerInfo, ControllerWarning

if TYPE_CHECKING:
    from consensus_operator.env import Env
    from consensus_operator.logging import Logger


class UpdateHandler(Protocol):
    async def handle(self, key: ComponentKey) -> UpdatePassResult:
        ...


class ConsensusController:

    def __init__(
        self,
        handler: UpdateHandler,
        logger: "Logger",
        max_workers: int = 1,
        requeue_delay: float = 1.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self._handler = handler
        self._logger = logger
        self._max_workers = max_workers
        self._requeue_delay = requeue_delay
        self._retry_config = retry_config or RetryConfig()

        self._queue: asyncio.Queue[ComponentKey] = asyncio.Queue()
        self._queued: set[ComponentKey] = set()
        self._in_flight: set[ComponentKey] = set()
        self._dirty: set[ComponentKey] = set()
        self._backoffs: dict[ComponentKey, Backoff] = {}
        self._timers: dict[ComponentKey, asyncio.TimerHandle] = {}

        self._workers: list[asyncio.Task] = []
        self._running = False

    @classmethod
    def from_env(
        cls,
        handler: UpdateHandler,
        logger: "Logger",
        env: "Env",
    ) -> "ConsensusController":
        return cls(
            handler,
            logger,
            max_workers=env.CONSENSUS_MAX_WORKERS,
            requeue_delay=env.CONSENSUS_REQUEUE_DELAY,
            retry_config=RetryConfig.from_env_config(env.get_retry_config()),
        )

    @property
    def running(self) -> bool:
        return self._running

    @property
    def idle(self) -> bool:
        """True when nothing is queued, processing or scheduled."""
        return not (self._queued or self._in_flight or self._timers)

    def failures(self, key: ComponentKey) -> int:
        backoff = self._backoffs.get(key)
        if backoff is None:
            return 0

        return backoff.attempts

    async def start(self) -> None:
        if self._running:
            return

        self._running = True
        self._workers = [
            asyncio.create_task(self._run_worker(worker_id))
            for worker_id in range(self._max_workers)
        ]

        await self._logger.log(ControllerInfo(
            message=f"Consensus controller started with {self._max_workers} workers",
        ))

    async def stop(self) -> None:
        """
        Cancel every worker and pending requeue. A pass interrupted here
        is simply re-run from fresh inputs the next time its key is queued.
        """
        self._running = False

        for timer in self._timers.values():
            timer.cancel()

        self._timers.clear()

        for worker in self._workers:
            worker.cancel()

        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()

        await self._logger.log(ControllerInfo(
            message="Consensus controller stopped",
        ))

    def enqueue(self, key: ComponentKey) -> None:
        if key in self._in_flight:
            self._dirty.add(key)
            return

        if key in self._queued:
            return

        self._queued.add(key)
        self._queue.put_nowait(key)

    def enqueue_after(self, key: ComponentKey, delay: float) -> None:
        """Queue key after delay seconds, keeping any earlier scheduled requeue."""
        loop = asyncio.get_running_loop()
        when = loop.time() + delay

        existing = self._timers.get(key)
        if existing is not None:
            if existing.when() <= when:
                return

            existing.cancel()

        self._timers[key] = loop.call_at(when, self._fire_requeue, key)

    def _fire_requeue(self, key: ComponentKey) -> None:
        self._timers.pop(key, None)
        self.enqueue(key)

    async def _run_worker(self, worker_id: int) -> None:
        while True:
            key = await self._queue.get()
            try:
                await self._process(key)

            except Exception as err:
                # Raised outside the handler, e.g. while logging a failed pass
                delay = self._retry_config.max_delay
                self.enqueue_after(key, delay)
                await self._logger.log(ControllerError(
                    message=(
                        f"Worker {worker_id} failed processing key with "
                        f"{type(err).__name__}, retrying in {delay:.2f}s: {err}"
                    ),
                    component=str(key),
                ))

            finally:
                self._queue.task_done()

    async def _process(self, key: ComponentKey) -> None:
        self._queued.discard(key)
        self._in_flight.add(key)

        try:
            result = await self._handler.handle(key)

        except ConsensusOperatorError as err:
            delay = self._backoff(key).next_delay()
            await self._logger.log(ControllerWarning(
                message=f"Pass failed, retrying in {delay:.2f}s: {err}",
                component=str(key),
                attempt=self._backoff(key).attempts,
            ))
            self.enqueue_after(key, delay)

        except Exception as err:
            delay = self._backoff(key).next_delay()
            await self._logger.log(ControllerError(
                message=(
                    f"Pass raised {type(err).__name__}, retrying in {delay:.2f}s: {err}"
                ),
                component=str(key),
                attempt=self._backoff(key).attempts,
            ))
            self.enqueue_after(key, delay)

        else:
            if result.done:
                self._backoffs.pop(key, None)
                await self._logger.log(ControllerDebug(
                    message=f"Pass finished: {result.state.value}",
                    component=str(key),
                ))

            else:
                backoff = self._backoffs.get(key)
                if backoff is not None:
                    backoff.reset()

                await self._logger.log(ControllerDebug(
                    message=(
                        f"Pass {result.state.value}, requeue in {self._requeue_delay}s"
                    ),
                    component=str(key),
                ))
                self.enqueue_after(key, self._requeue_delay)

        finally:
            self._in_flight.discard(key)

            if key in self._dirty:
                self._dirty.discard(key)
                self.enqueue(key)

    def _backoff(self, key: ComponentKey) -> Backoff:
        backoff = self._backoffs.get(key)
        if backoff is None:
            backoff = Backoff(self._retry_config)
            self._backoffs[key] = backoff

        return backoff
