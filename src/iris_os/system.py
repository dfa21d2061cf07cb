"""The system — owner of one session's file system and log.

``System`` plays the role a kernel plays in a real OS: it brings the
subsystems up in order, hands them to whoever needs them, and tears
them down again.  Its lifecycle is an explicit state machine:

    SHUTDOWN  →  BOOTING  →  RUNNING  →  SHUTTING_DOWN  →  SHUTDOWN

Boot sequence:
    0. Logger — capture events from the start.
    1. File system — root plus the default layout.

There is no module-level file system.  Each ``System`` creates its own
on boot and the shell receives it by reference, so two systems in the
same process (as in the test suite) never share state.
"""

from __future__ import annotations

from enum import StrEnum
from time import monotonic

from iris_os.config import SystemConfig
from iris_os.fs.filesystem import FileSystem, seed_filesystem
from iris_os.logging import Logger, LogLevel

_SOURCE = "system"


class SystemState(StrEnum):
    """The lifecycle phases of the system."""

    SHUTDOWN = "shutdown"
    BOOTING = "booting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


class System:
    """Coordinates the lifecycle of the file system and logger.

    Subsystem accessors raise while the system is not running.
    """

    def __init__(self, config: SystemConfig | None = None) -> None:
        """Create a system in the SHUTDOWN state."""
        self._config = config or SystemConfig()
        self._state = SystemState.SHUTDOWN
        self._filesystem: FileSystem | None = None
        self._logger: Logger | None = None
        self._boot_time: float | None = None
        self._boot_log: list[str] = []

    @property
    def config(self) -> SystemConfig:
        """Return the configuration this system was created with."""
        return self._config

    @property
    def state(self) -> SystemState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def uptime(self) -> float:
        """Return seconds elapsed since boot, or 0.0 if not running."""
        if self._boot_time is None:
            return 0.0
        return monotonic() - self._boot_time

    @property
    def filesystem(self) -> FileSystem:
        """Return the file system of the running system."""
        self._require_running()
        assert self._filesystem is not None  # noqa: S101
        return self._filesystem

    @property
    def logger(self) -> Logger:
        """Return the logger of the running system."""
        self._require_running()
        assert self._logger is not None  # noqa: S101
        return self._logger

    def _require_running(self) -> None:
        if self._state is not SystemState.RUNNING:
            msg = f"System is {self._state}, not running"
            raise RuntimeError(msg)

    def dmesg(self) -> list[str]:
        """Return the boot log, one message per initialised subsystem."""
        return list(self._boot_log)

    def boot(self) -> None:
        """Transition the system from SHUTDOWN → RUNNING.

        Raises:
            RuntimeError: If the system is not in the SHUTDOWN state.

        """
        if self._state is not SystemState.SHUTDOWN:
            msg = f"Cannot boot: system is {self._state}, expected shutdown"
            raise RuntimeError(msg)

        self._state = SystemState.BOOTING
        self._boot_time = monotonic()
        self._boot_log = []

        # 0. Logger: capture events from the start
        self._logger = Logger(capacity=self._config.log_capacity)
        self._boot_log.append("[OK] Logger")

        # 1. File system: root and default layout
        filesystem = FileSystem()
        seed_filesystem(filesystem, home=self._config.home)
        self._filesystem = filesystem
        self._boot_log.append(f"[OK] File system (home: {self._config.home})")

        if self._config.safe_mode:
            self._boot_log.append("[WARN] Safe mode: terminal only")

        self._state = SystemState.RUNNING
        self._logger.log(
            LogLevel.INFO,
            f"IrisOS v{self._config.version} booted on {self._config.hostname}",
            source=_SOURCE,
        )

    def shutdown(self) -> None:
        """Transition the system from RUNNING → SHUTDOWN.

        The file system is discarded; nothing is persisted.

        Raises:
            RuntimeError: If the system is not in the RUNNING state.

        """
        if self._state is not SystemState.RUNNING:
            msg = f"Cannot shutdown: system is {self._state}, expected running"
            raise RuntimeError(msg)

        self._state = SystemState.SHUTTING_DOWN
        if self._logger is not None:
            self._logger.log(LogLevel.INFO, "System shutting down", source=_SOURCE)

        # Tear down in reverse order
        self._filesystem = None
        self._logger = None
        self._boot_time = None
        self._state = SystemState.SHUTDOWN
