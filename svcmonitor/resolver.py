"""Find the process serving a service by matching its command line."""

import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

import psutil

from .models import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1.0


def parse_pids(output: str) -> List[int]:
    """Return the PIDs listed in ``pgrep`` output, in the order printed."""
    pids = []
    for field in output.split():
        if field.isdigit():
            pids.append(int(field))
    return pids


def first_matching_pid(
    processes: Iterable[psutil.Process], token: str, exclude: Optional[int] = None
) -> Optional[int]:
    """Return the pid of the first process whose command line contains ``token``."""
    for proc in processes:
        try:
            info = proc.info
            pid = info.get("pid")
            cmdline = info.get("cmdline") or []
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
        if pid == exclude:
            continue
        if token in " ".join(cmdline):
            return pid
    return None


class ProcessResolver:
    """Base class for resolvers. ``resolve`` never raises."""

    name = "base"

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    async def resolve(self, token: str) -> Optional[int]:
        raise NotImplementedError


class PsutilResolver(ProcessResolver):
    """Scans the process table through psutil."""

    name = "psutil"

    def _scan(self, token: str) -> Optional[int]:
        processes = psutil.process_iter(["pid", "cmdline"])
        return first_matching_pid(processes, token, exclude=os.getpid())

    async def resolve(self, token: str) -> Optional[int]:
        # Own executor: the loop's default one is joined by asyncio.run
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="process-scan")
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(executor, self._scan, token),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Process scan for %r timed out", token)
        except (psutil.Error, OSError) as exc:
            logger.warning("Process scan for %r failed: %s", token, exc)
        finally:
            executor.shutdown(wait=False)
        return None


class PgrepResolver(ProcessResolver):
    """Shells out to ``pgrep -f`` and takes the first listed PID."""

    name = "pgrep"

    async def resolve(self, token: str) -> Optional[int]:
        try:
            proc = await asyncio.create_subprocess_exec(
                "pgrep",
                "-f",
                token,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.warning("pgrep unavailable: %s", exc)
            return None

        try:
            stdout, _ = await asyncio.wait_for(
                proc.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning("pgrep for %r timed out", token)
            proc.kill()
            await proc.wait()
            return None

        # pgrep exits 1 when nothing matched; stdout is empty then
        pids = parse_pids(stdout.decode(errors="replace"))
        if not pids:
            logger.debug("No process matches %r (pgrep exit %s)", token, proc.returncode)
            return None
        return pids[0]


RESOLVERS = {
    PsutilResolver.name: PsutilResolver,
    PgrepResolver.name: PgrepResolver,
}


def make_resolver(kind: str = "psutil", timeout: float = DEFAULT_TIMEOUT) -> ProcessResolver:
    """Build the resolver registered under ``kind``."""
    try:
        cls = RESOLVERS[kind]
    except KeyError:
        raise ConfigurationError(
            f"unknown resolver {kind!r}, expected one of {sorted(RESOLVERS)}"
        ) from None
    return cls(timeout=timeout)
