"""A tiny shell with job control: foreground, background and stopped jobs."""

from __future__ import annotations

import getopt
import os
import signal
import sys
import threading
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, TextIO

MAXLINE = 1024
MAXARGS = 128
MAXJOBS = 16
PROMPT = "tsh> "

_WAIT_INTERVAL = 0.001


class JobState(IntEnum):
    """State of a job: UNDEF, foreground, background or stopped."""

    UNDEF = 0
    FG = 1
    BG = 2
    ST = 3


_STATE_WORDS = {JobState.BG: "Running ", JobState.FG: "Foreground ", JobState.ST: "Stopped "}


@dataclass
class Job:
    """One job: its process id, job id, state and the command line that started it."""

    pid: int
    jid: int
    state: JobState
    cmdline: str


class JobListFullError(RuntimeError):
    """Raised when every job slot is taken."""


class JobList:
    """A fixed number of job slots; job ids are handed out in turn."""

    def __init__(self, verbose: bool = False, out: Optional[TextIO] = None) -> None:
        self._slots: list[Optional[Job]] = [None] * MAXJOBS
        self.next_jid = 1
        self.verbose = verbose
        self._out = out

    def __iter__(self) -> Iterator[Job]:
        return (job for job in self._slots if job is not None)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def max_jid(self) -> int:
        """Largest job id in use, or 0."""
        return max((job.jid for job in self), default=0)

    def add(self, pid: int, state: JobState, cmdline: str) -> Job:
        """Add a job in the first free slot.

        Raises ValueError for a pid below 1 and JobListFullError when full.
        """
        if pid < 1:
            raise ValueError(f"invalid pid: {pid}")
        for index, slot in enumerate(self._slots):
            if slot is None:
                job = Job(pid, self.next_jid, JobState(state), cmdline)
                self.next_jid += 1
                if self.next_jid > MAXJOBS:
                    self.next_jid = 1
                self._slots[index] = job
                if self.verbose:
                    out = self._out if self._out is not None else sys.stdout
                    print(f"Added job [{job.jid}] {job.pid} {job.cmdline}", file=out)
                return job
        raise JobListFullError("Tried to create too many jobs")

    def delete(self, pid: int) -> bool:
        """Remove the job with this pid; True if there was one."""
        if pid < 1:
            return False
        for index, slot in enumerate(self._slots):
            if slot is not None and slot.pid == pid:
                self._slots[index] = None
                self.next_jid = self.max_jid() + 1
                return True
        return False

    def fg_pid(self) -> int:
        """Pid of the foreground job, or 0."""
        return next((job.pid for job in self if job.state == JobState.FG), 0)

    def by_pid(self, pid: int) -> Optional[Job]:
        """The job with this pid, if any."""
        if pid < 1:
            return None
        return next((job for job in self if job.pid == pid), None)

    def by_jid(self, jid: int) -> Optional[Job]:
        """The job with this job id, if any."""
        if jid < 1:
            return None
        return next((job for job in self if job.jid == jid), None)

    def pid_to_jid(self, pid: int) -> int:
        """Job id of the process, or 0."""
        job = self.by_pid(pid)
        return job.jid if job is not None else 0

    def listing(self) -> str:
        """The job table as the ``jobs`` command prints it."""
        parts = []
        for index, slot in enumerate(self._slots):
            if slot is None:
                continue
            word = _STATE_WORDS.get(slot.state)
            if word is None:
                word = f"listjobs: Internal error: job[{index}].state={int(slot.state)} "
            parts.append(f"[{slot.jid}] ({slot.pid}) {word}{slot.cmdline}")
        return "".join(parts)


def _skip_spaces(buf: str, pos: int) -> int:
    while pos < len(buf) and buf[pos] == " ":
        pos += 1
    return pos


def _next_delim(buf: str, pos: int) -> tuple[int, int]:
    if pos < len(buf) and buf[pos] == "'":
        pos += 1
        return pos, buf.find("'", pos)
    return pos, buf.find(" ", pos)


def parseline(cmdline: str) -> tuple[list[str], bool]:
    """Split a command line into arguments; also report whether it asks for background.

    The last character (normally the newline) is dropped. Text in single quotes
    is one argument. A blank line counts as a background request, as a trailing
    argument starting with ``&`` does; that argument is removed.
    """
    buf = (cmdline[:-1] if cmdline else "") + " "
    pos = _skip_spaces(buf, 0)
    argv: list[str] = []
    pos, delim = _next_delim(buf, pos)
    while delim != -1:
        argv.append(buf[pos:delim])
        pos = _skip_spaces(buf, delim + 1)
        pos, delim = _next_delim(buf, pos)
    if not argv:
        return argv, True
    background = argv[-1].startswith("&")
    if background:
        argv.pop()
    return argv, background


class _Quit(Exception):
    """The user asked the shell to stop."""


def _is_number(text: str) -> bool:
    return text.isascii() and text.isdigit()


class _Shell:
    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self.jobs = JobList(verbose=verbose)

    def eval(self, cmdline: str) -> None:
        argv, background = parseline(cmdline)
        if not argv or self.builtin_cmd(argv):
            return
        blocked = {signal.SIGCHLD}
        signal.pthread_sigmask(signal.SIG_BLOCK, blocked)
        try:
            try:
                pid = os.posix_spawnp(
                    argv[0],
                    argv,
                    os.environ,
                    file_actions=[(os.POSIX_SPAWN_DUP2, 1, 2)],
                    setpgroup=0,
                    setsigmask=(),
                )
            except OSError:
                print(f"{argv[0]}: Command not found")
                return
            try:
                job = self.jobs.add(pid, JobState.BG if background else JobState.FG, cmdline)
            except JobListFullError as exc:
                print(exc)
                return
        finally:
            signal.pthread_sigmask(signal.SIG_UNBLOCK, blocked)
        if background:
            print(f"[{job.jid}] ({job.pid}) {job.cmdline}", end="")
        else:
            self.waitfg(pid)

    def builtin_cmd(self, argv: list[str]) -> bool:
        name = argv[0]
        if name == "quit":
            raise _Quit
        if name == "jobs":
            print(self.jobs.listing(), end="")
            return True
        if name in ("bg", "fg"):
            self.do_bgfg(argv)
            return True
        return name == "&"

    def do_bgfg(self, argv: list[str]) -> None:
        name = argv[0]
        if len(argv) < 2:
            print(f"{name} command requires PID or %jobid argument")
            return
        arg = argv[1]
        if arg.startswith("%") and _is_number(arg[1:]):
            job = self.jobs.by_jid(int(arg[1:]))
            if job is None:
                print(f"{arg}: No such job")
                return
        elif _is_number(arg):
            job = self.jobs.by_pid(int(arg))
            if job is None:
                print(f"({arg}): No such process")
                return
        else:
            print(f"{name}: argument must be a PID or %jobid")
            return
        try:
            os.killpg(job.pid, signal.SIGCONT)
        except ProcessLookupError:
            pass
        if name == "bg":
            job.state = JobState.BG
            print(f"[{job.jid}] ({job.pid}) {job.cmdline}", end="")
        else:
            job.state = JobState.FG
            self.waitfg(job.pid)

    def waitfg(self, pid: int) -> None:
        while self.jobs.fg_pid() == pid:
            time.sleep(_WAIT_INTERVAL)
        if self.verbose:
            print(f"waitfg: Process ({pid}) no longer the fg process")

    def sigchld_handler(self, signum, frame) -> None:  # noqa: ARG002
        while True:
            try:
                pid, status = os.waitpid(-1, os.WNOHANG | os.WUNTRACED)
            except ChildProcessError:
                return
            if pid == 0:
                return
            jid = self.jobs.pid_to_jid(pid)
            if os.WIFSTOPPED(status):
                job = self.jobs.by_pid(pid)
                if job is not None:
                    job.state = JobState.ST
                print(f"Job [{jid}] ({pid}) stopped by signal {os.WSTOPSIG(status)}")
            elif os.WIFSIGNALED(status):
                print(f"Job [{jid}] ({pid}) terminated by signal {os.WTERMSIG(status)}")
                self.jobs.delete(pid)
            elif os.WIFEXITED(status):
                self.jobs.delete(pid)

    def _forward(self, sig: int) -> None:
        pid = self.jobs.fg_pid()
        if pid:
            try:
                os.killpg(pid, sig)
            except ProcessLookupError:
                pass

    def sigint_handler(self, signum, frame) -> None:  # noqa: ARG002
        self._forward(signal.SIGINT)

    def sigtstp_handler(self, signum, frame) -> None:  # noqa: ARG002
        self._forward(signal.SIGTSTP)


def _sigquit_handler(signum, frame) -> None:  # noqa: ARG001
    print("Terminating after receipt of SIGQUIT signal")
    sys.stdout.flush()
    raise SystemExit(1)


def _usage() -> None:
    print("Usage: shell [-hvp]")
    print("   -h   print this message")
    print("   -v   print additional diagnostic information")
    print("   -p   do not emit a command prompt")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Read and run command lines until end of input or ``quit``."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        options, _ = getopt.getopt(args, "hvp")
    except getopt.GetoptError:
        _usage()
        return 1
    verbose = False
    emit_prompt = True
    for flag, _value in options:
        if flag == "-h":
            _usage()
            return 1
        if flag == "-v":
            verbose = True
        elif flag == "-p":
            emit_prompt = False

    shell = _Shell(verbose)
    handlers = {
        signal.SIGINT: shell.sigint_handler,
        signal.SIGTSTP: shell.sigtstp_handler,
        signal.SIGCHLD: shell.sigchld_handler,
        signal.SIGQUIT: _sigquit_handler,
    }
    installed: dict[int, object] = {}
    if threading.current_thread() is threading.main_thread():
        for signum, handler in handlers.items():
            installed[signum] = signal.signal(signum, handler)
    try:
        while True:
            if emit_prompt:
                print(PROMPT, end="", flush=True)
            line = sys.stdin.readline(MAXLINE - 1)
            if not line.endswith("\n"):
                sys.stdout.flush()
                return 0
            try:
                shell.eval(line)
            except _Quit:
                sys.stdout.flush()
                return 0
            sys.stdout.flush()
    finally:
        for signum, previous in installed.items():
            signal.signal(signum, previous)


if __name__ == "__main__":
    sys.exit(main())