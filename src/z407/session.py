"""BLE session supervisor.

One worker event loop runs SessionSupervisor.run(). The supervisor owns the
StateStore writes for connection state and walks every connect request
through IDLE -> SCANNING -> CONNECTING -> HANDSHAKING -> ACTIVE -> IDLE.
Failures end the session and return to IDLE; nothing reconnects until the
UI asks again.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from .exceptions import NotificationSetupError, Z407Error
from .models.config import SessionConfig
from .models.enums import InputSource, SessionPhase
from .models.state import StateStore
from .protocol import Command, ResponseCode, decode_response, input_source_for, perform_handshake
from .transport import AdapterSession, BLEConnection, Discovery

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

    from .transport.base import FrameWriter, SessionLink

_LOGGER = logging.getLogger(__name__)

ConnectionFactory = Callable[["BLEDevice"], "SessionLink"]
Handshake = Callable[["FrameWriter", float], Awaitable[None]]


class CommandChannel:
    """FIFO of commands waiting to be written.

    Must only be touched from the worker loop; SessionSupervisor.submit()
    is the thread-safe entry point.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Command] = asyncio.Queue()

    def submit(self, command: Command) -> None:
        """Enqueue without blocking."""
        self._queue.put_nowait(command)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def clear(self) -> int:
        """Drop everything queued.

        Returns:
            Number of discarded commands
        """
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return dropped
            self._queue.task_done()
            dropped += 1

    async def drain(self, writer: FrameWriter) -> None:
        """Write queued commands in order until a write fails.

        Raises:
            WriteFailureError: On the first failed write
        """
        while True:
            command = await self._queue.get()
            try:
                await writer.write_command(command.to_bytes())
            finally:
                self._queue.task_done()


class ResponseStream:
    """Decodes puck notifications into state updates."""

    def __init__(self, store: StateStore) -> None:
        self._store = store

    async def subscribe(self, connection: SessionLink) -> bool:
        """Start notifications for the session.

        Returns:
            False if the subscription failed (session continues degraded)
        """
        try:
            await connection.start_notifications(self.handle_frame)
        except NotificationSetupError as e:
            _LOGGER.warning("Input source feedback unavailable: %s", e)
            self._store.publish(notifications_active=False)
            return False

        self._store.publish(notifications_active=True)
        return True

    def handle_frame(self, data: bytes) -> ResponseCode:
        """Apply one notification frame to the shared state."""
        code = decode_response(data)
        _LOGGER.debug("Response: %s (%s)", bytes(data).hex(), code.name)

        source = input_source_for(code)
        if source is not None:
            self._store.publish(current_input=source)
        return code


class SessionSupervisor:
    """Runs BLE sessions on request.

    Usage:
        supervisor = SessionSupervisor()
        task = asyncio.create_task(supervisor.run())
        supervisor.request_connect()
        ...
        supervisor.stop()
        await task

    request_connect(), submit() and stop() may be called from any thread.
    """

    def __init__(
            self,
            store: StateStore | None = None,
            config: SessionConfig | None = None,
            *,
            adapter_session: AdapterSession | None = None,
            discovery: Discovery | None = None,
            connection_factory: ConnectionFactory | None = None,
            handshake: Handshake = perform_handshake,
    ):
        """Initialize the supervisor.

        Args:
            store: State store to publish into (default: new store)
            config: Session tunables (default: SessionConfig())
            adapter_session: Adapter acquisition (default: AdapterSession)
            discovery: Puck discovery (default: Discovery)
            connection_factory: Builds a connection for a discovered device
            handshake: Initialization sequence run after connecting
        """
        self.store = store or StateStore()
        self.config = config or SessionConfig()

        self._adapter_session = adapter_session or AdapterSession(self.config.adapter)
        self._discovery = discovery or Discovery()
        self._connection_factory = connection_factory or self._create_connection
        self._handshake = handshake

        self._channel = CommandChannel()
        self._responses = ResponseStream(self.store)

        self._loop_lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_requested = False
        self._wakeup: asyncio.Event | None = None
        self._stopping: asyncio.Event | None = None

        self.last_failure: BaseException | None = None

    @property
    def phase(self) -> SessionPhase:
        return self.store.snapshot().phase

    @property
    def is_running(self) -> bool:
        with self._loop_lock:
            return self._loop is not None

    def _create_connection(self, device: BLEDevice) -> BLEConnection:
        return BLEConnection(
            device,
            timeout=self.config.connect_timeout,
            max_attempts=self.config.max_attempts,
            use_services_cache=self.config.use_services_cache,
        )

    # Thread-safe entry points

    def request_connect(self) -> None:
        """Ask for a new session."""
        self.store.request_connect()
        self._call_soon(self._wake)

    def submit(self, command: Command) -> bool:
        """Queue a command for the active session.

        Returns:
            False if the worker loop is not running
        """
        return self._call_soon(self._submit, command)

    def stop(self) -> None:
        """Ask run() to end the current session and return."""
        with self._loop_lock:
            self._stop_requested = True
            running = self._loop is not None
        if running:
            self._call_soon(self._request_stop)

    def _call_soon(self, callback: Callable[..., Any], *args: Any) -> bool:
        with self._loop_lock:
            loop = self._loop
        if loop is None:
            return False

        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        if current is loop:
            callback(*args)
            return True

        try:
            loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:  # loop closed under us
            return False
        return True

    def _submit(self, command: Command) -> None:
        self._channel.submit(command)

    def _wake(self) -> None:
        if self._wakeup is not None:
            self._wakeup.set()

    def _request_stop(self) -> None:
        if self._stopping is not None:
            self._stopping.set()
        self._wake()

    # Worker

    async def run(self) -> None:
        """Serve connect requests until stop() is called."""
        self._wakeup = asyncio.Event()
        self._stopping = asyncio.Event()
        # Queues bind to the loop that first waits on them
        self._channel = CommandChannel()
        with self._loop_lock:
            self._loop = asyncio.get_running_loop()
            if self._stop_requested:
                self._stopping.set()

        _LOGGER.debug("Session supervisor started")
        try:
            while not self._stopping.is_set():
                self._wakeup.clear()
                if not self.store.snapshot().connect_requested:
                    await self._wakeup.wait()
                    continue
                await self._run_until_stopped(self.run_session())
        finally:
            with self._loop_lock:
                self._loop = None
                self._stop_requested = False
            self.store.publish(connected=False, phase=SessionPhase.IDLE)
            _LOGGER.debug("Session supervisor stopped")

    async def _run_until_stopped(self, session: Awaitable[None]) -> None:
        """Await a session, cancelling it if stop() arrives first."""
        session_task = asyncio.ensure_future(session)
        stop_task = asyncio.create_task(self._stopping.wait(), name="z407-stop")
        try:
            await asyncio.wait((session_task, stop_task), return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop_task.cancel()
            if not session_task.done():
                _LOGGER.info("Stopping active session")
                session_task.cancel()
            await asyncio.gather(session_task, stop_task, return_exceptions=True)

    async def run_session(self) -> None:
        """Run one session from scan to teardown.

        Session-fatal errors are logged and recorded in last_failure; they
        never propagate.
        """
        connection: SessionLink | None = None
        self.last_failure = None

        try:
            self.store.publish(phase=SessionPhase.SCANNING)
            adapter = await self._adapter_session.acquire()
            device = await self._discovery.scan(self.config.scan_timeout, adapter=adapter)

            self.store.publish(phase=SessionPhase.CONNECTING)
            connection = self._connection_factory(device)
            await connection.connect()

            # Default source until the puck reports otherwise
            self.store.publish(phase=SessionPhase.HANDSHAKING, current_input=InputSource.BLUETOOTH)
            await self._responses.subscribe(connection)
            await self._handshake(connection, self.config.settle_interval)

            # Anything queued before the handshake belongs to no session
            self._channel.clear()
            self.store.publish(
                connected=True,
                connect_requested=False,
                phase=SessionPhase.ACTIVE,
            )
            _LOGGER.info("Connected to Z407 %s", getattr(device, "address", device))

            await self._run_active(connection)

        except Z407Error as e:
            self.last_failure = e
            _LOGGER.error("Session failed: %s", e)
        except Exception as e:
            self.last_failure = e
            _LOGGER.exception("Unexpected session error")
        finally:
            dropped = self._channel.clear()
            if dropped:
                _LOGGER.debug("Discarded %d unsent command(s)", dropped)
            if connection is not None:
                await connection.disconnect()
            self.store.publish(
                connected=False,
                connect_requested=False,
                notifications_active=False,
                phase=SessionPhase.IDLE,
            )
            _LOGGER.info("Session ended")

    async def _run_active(self, connection: SessionLink) -> None:
        """Drain commands and watch the link until something ends the session.

        Raises:
            WriteFailureError: If a command write failed
        """
        drain = asyncio.create_task(self._channel.drain(connection), name="z407-commands")
        lost = asyncio.create_task(connection.wait_disconnected(), name="z407-link")
        tasks = (drain, lost)

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        if drain in done:
            drain.result()
        else:
            _LOGGER.warning("Z407 disconnected")
