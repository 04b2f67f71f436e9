"""
=============================================================================
SESSION SUPERVISOR: ONE THREAD PER CONNECTION, PLUS A REAPER
=============================================================================

Every accepted connection gets its own execution context: a dedicated
thread that runs that connection's session and nothing else. The acceptor
never waits for any of them. A separate reaper thread cleans up after
contexts as they finish.

=============================================================================
WHY NOT A FIXED POOL?
=============================================================================

Sessions here are long-lived and interactive: a client can sit idle at
its prompt for minutes. With a fixed pool of N workers the (N+1)th client
would queue behind an idle one. Thread-per-connection keeps every client
served; the limit is what the host can start threads for, and an optional
max_sessions cap turns that limit into a clean "drop this connection".

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        SessionSupervisor                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   acceptor ──spawn()──► ┌──────────────┐ ┌──────────────┐           │
    │                         │ Session-1    │ │ Session-2    │  ...      │
    │                         │ (thread)     │ │ (thread)     │           │
    │                         └──────┬───────┘ └──────┬───────┘           │
    │                                │ finished       │ finished          │
    │                                ▼                ▼                    │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │                   COMPLETION QUEUE                           │   │
    │   │  [Session-7] [Session-2] ...                                 │   │
    │   └──────────────────────┬──────────────────────────────────────┘   │
    │                          │ get() + drain                             │
    │                          ▼                                           │
    │                 ┌─────────────────┐                                  │
    │                 │  Reaper thread  │  join(), drop from live table,   │
    │                 │                 │  record clean / abnormal exit    │
    │                 └─────────────────┘                                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Each time the reaper wakes it drains EVERY completion already queued, not
just the one that woke it, so a burst of sessions finishing together is
cleaned up in one pass.

=============================================================================
EXIT CODES
=============================================================================

A context that returns normally exits with 0. If its session raises, the
context logs the error and exits with 1. Either way it posts itself to
the completion queue, and only that one session is affected.

=============================================================================
"""

import queue
import threading
import time
import logging
from enum import Enum
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class ContextState(Enum):
    """Execution context lifecycle."""
    STARTING = "starting"
    RUNNING = "running"
    FINISHED = "finished"   # Session returned or raised, awaiting reaper
    REAPED = "reaped"       # Joined and removed from the live table


class ExecutionContext(threading.Thread):
    """
    Thread running exactly one session.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Context Lifecycle                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. target(*args)                                                  │
    │          │                                                           │
    │          ├── returns → exitcode = 0                                 │
    │          └── raises  → log, exitcode = 1                            │
    │                                                                      │
    │   2. Post self to the completion queue (always)                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(
        self,
        context_id: int,
        target: Callable[..., Any],
        args: tuple,
        completions: queue.Queue,
    ):
        # daemon=True: an idle client can't keep the process alive on exit
        super().__init__(name=f"Session-{context_id}", daemon=True)

        self.context_id = context_id
        self._target_func = target
        self._target_args = args
        self._completions = completions

        self.state = ContextState.STARTING
        self.exitcode: Optional[int] = None
        self.started_at = 0.0
        self.finished_at = 0.0

    @property
    def abnormal(self) -> bool:
        return self.exitcode not in (None, 0)

    def run(self):
        self.state = ContextState.RUNNING
        self.started_at = time.time()

        try:
            self._target_func(*self._target_args)
            self.exitcode = 0
        except Exception as e:
            logger.error(f"{self.name} terminated abnormally: {e}")
            logger.debug(f"{self.name} traceback", exc_info=True)
            self.exitcode = 1
        finally:
            self.finished_at = time.time()
            self.state = ContextState.FINISHED
            self._completions.put(self)


class SessionSupervisor:
    """
    Spawns execution contexts and reaps them when they finish.

    Usage:
        supervisor = SessionSupervisor()
        supervisor.start()

        if supervisor.spawn(handle_session, conn) is None:
            conn.drop()   # could not start a context, drop the client

        supervisor.shutdown()

    Only spawn() (acceptor thread) and the reaper touch the live table,
    under a lock. Sessions themselves never see the supervisor.
    """

    def __init__(self, max_sessions: Optional[int] = None):
        """
        Args:
            max_sessions: Optional cap on live contexts. None = unlimited.
        """
        self.max_sessions = max_sessions

        # Finished contexts, plus a None sentinel on shutdown
        self._completions: queue.Queue[Optional[ExecutionContext]] = queue.Queue()

        self._contexts: dict[int, ExecutionContext] = {}
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._next_context_id = 0

        self._reaper: Optional[threading.Thread] = None

        self._spawned = 0
        self._reaped = 0
        self._failed = 0
        self._rejected = 0

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self):
        """Start the reaper thread."""
        if self._reaper is not None:
            return

        self._reaper = threading.Thread(target=self._reap_loop, name="Reaper", daemon=True)
        self._reaper.start()
        logger.debug("Reaper started")

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the reaper.

        Args:
            wait: Wait for live sessions to finish (and be reaped) first.
            timeout: Upper bound on that wait; sessions still running
                     afterwards are abandoned (they are daemon threads).
        """
        if self._reaper is None:
            return

        if wait and not self.wait_idle(timeout):
            logger.warning(f"Abandoning {self.active_count} running session(s)")

        self._completions.put(None)
        self._reaper.join(timeout=2.0)
        self._reaper = None
        logger.debug("Reaper stopped")

    # =========================================================================
    # SPAWNING
    # =========================================================================

    def spawn(self, target: Callable[..., Any], *args: Any) -> Optional[ExecutionContext]:
        """
        Run target(*args) in a new execution context.

        Returns:
            The running context, or None if none could be started
            (session cap reached or the OS refused a new thread). The
            caller still owns the arguments in that case.
        """
        with self._lock:
            if self.max_sessions is not None and len(self._contexts) >= self.max_sessions:
                self._rejected += 1
                logger.warning(f"Session limit reached ({self.max_sessions}), cannot spawn")
                return None

            context = ExecutionContext(
                context_id=self._next_context_id,
                target=target,
                args=args,
                completions=self._completions,
            )
            self._next_context_id += 1
            self._contexts[context.context_id] = context

            try:
                context.start()
            except RuntimeError as e:
                # "can't start new thread": resource exhaustion
                del self._contexts[context.context_id]
                self._rejected += 1
                logger.error(f"Failed to start session thread: {e}")
                return None

            self._spawned += 1

        return context

    # =========================================================================
    # REAPING
    # =========================================================================

    def _reap_loop(self):
        """
        Reaper thread body.

        Blocks for one completion, then drains everything else already
        queued before blocking again. Exits on the None sentinel, after
        reaping whatever arrived with it.
        """
        stopping = False

        while not stopping:
            batch = [self._completions.get()]
            while True:
                try:
                    batch.append(self._completions.get_nowait())
                except queue.Empty:
                    break

            for context in batch:
                if context is None:
                    stopping = True
                    continue
                self._reap(context)

    def _reap(self, context: ExecutionContext):
        """Join a finished context and drop it from the live table."""
        # Already posted from its finally block, so this returns at once
        context.join()

        with self._lock:
            self._contexts.pop(context.context_id, None)
            context.state = ContextState.REAPED
            self._reaped += 1
            if context.abnormal:
                self._failed += 1
            if not self._contexts:
                self._idle.notify_all()

        logger.debug(
            f"Reaped {context.name} (exit {context.exitcode}, "
            f"ran {context.finished_at - context.started_at:.3f}s)"
        )

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every spawned context has finished and been reaped.

        Returns:
            True if idle, False if the timeout expired first.
        """
        with self._lock:
            return self._idle.wait_for(lambda: not self._contexts, timeout)

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def active_count(self) -> int:
        """Contexts spawned but not yet reaped."""
        with self._lock:
            return len(self._contexts)

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                "active": len(self._contexts),
                "spawned": self._spawned,
                "reaped": self._reaped,
                "failed": self._failed,
                "rejected": self._rejected,
            }
