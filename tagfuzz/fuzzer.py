from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tagfuzz import mutator as mut, util


@dataclass(frozen=True)
class Outcome:
    mutation: mut.Mutation


@dataclass(frozen=True)
class Completed(Outcome):
    exit_code: int
    output: str

    @property
    def anomalous(self) -> bool:
        return self.exit_code != 0


@dataclass(frozen=True)
class TimedOut(Outcome):
    output: str


@dataclass(frozen=True)
class Failure(Outcome):
    message: str


@dataclass(frozen=True)
class LaunchFailed(Failure):
    pass


@dataclass(frozen=True)
class IOFailed(Failure):
    pass


def _decode(output: Optional[bytes]) -> str:
    return (output or b"").decode("utf-8", errors="replace")


def _kill(proc: subprocess.Popen[bytes]) -> None:
    if hasattr(os, "killpg"):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:  # pragma: no cover
        proc.kill()


def run(
    command: util.Command,
    mutation: mut.Mutation,
    working_dir: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> Outcome:
    """
    Execute command once with the mutated input on its standard input.

    Standard output and standard error are combined. Errors while starting the process or while
    communicating with it are returned as outcomes instead of being raised.

    Arguments:
    ---------
    command:        Shell command line (run through the platform shell) or argument list.
    mutation:       Input to pass to the command.
    working_dir:    Directory to execute the command in (default: current directory).
    timeout:        Seconds after which the command is killed. Wait indefinitely if None.
    """

    try:
        proc = subprocess.Popen(  # noqa: S603
            command,
            shell=isinstance(command, str),  # noqa: S602
            cwd=working_dir,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            start_new_session=timeout is not None,
        )
    except OSError as e:
        return LaunchFailed(mutation=mutation, message=f"{type(e).__name__}: {e}")

    with proc:
        try:
            output, _ = proc.communicate(input=mutation.data, timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill(proc)
            output, _ = proc.communicate()
            return TimedOut(mutation=mutation, output=_decode(output))
        except OSError as e:
            proc.kill()
            return IOFailed(mutation=mutation, message=f"{type(e).__name__}: {e}")

    return Completed(mutation=mutation, exit_code=proc.returncode, output=_decode(output))


class Fuzzer:
    def __init__(  # noqa: PLR0913
        self,
        command: util.Command,
        seed: bytes = mut.DEFAULT_SEED,
        working_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
        mutator: Optional[mut.Mutator] = None,
    ):
        """
        Run command once for the seed and once for every mutation derived from it.

        Arguments:
        ---------
        command:        Command to fuzz-test. Strings are executed by the platform shell,
                        sequences are executed directly. Input is passed on standard input,
                        non-zero exit codes are considered anomalies.
        seed:           Input to derive mutations from.
        working_dir:    Directory to execute command in (default: current directory).
        timeout:        Seconds after which a hanging command is killed. Wait indefinitely
                        if None.
        mutator:        Mutator to derive inputs with (default: full catalog, unseeded).
        """

        self._command = command
        self._seed = bytes(seed)
        self._working_dir = working_dir
        self._timeout = timeout
        self._mutator = mutator if mutator is not None else mut.Mutator()

    def mutations(self) -> list[mut.Mutation]:
        return self._mutator.generate(self._seed)

    def run_all(self) -> list[Outcome]:
        mutations = self.mutations()

        logging.info("Command: %s", self._command)

        result = []
        for number, mutation in enumerate(mutations, start=1):
            outcome = run(
                command=self._command,
                mutation=mutation,
                working_dir=self._working_dir,
                timeout=self._timeout,
            )
            self._report(number, len(mutations), outcome)
            result.append(outcome)

        return result

    def _report(self, number: int, total: int, outcome: Outcome) -> None:
        prefix = f"Input {number}/{total} [{outcome.mutation.name}]"

        if isinstance(outcome, Completed):
            logging.info("%s: exit code %d", prefix, outcome.exit_code)
            if outcome.anomalous:
                self._log_anomaly(outcome.mutation.data, outcome.output)

        elif isinstance(outcome, TimedOut):
            logging.info("%s: timeout after %s seconds", prefix, self._timeout)
            self._log_anomaly(outcome.mutation.data, outcome.output)

        elif isinstance(outcome, Failure):
            logging.info(
                "%s: %s\nException:\n%s\n",
                prefix,
                "launch failed" if isinstance(outcome, LaunchFailed) else "I/O failed",
                util.indent(outcome.message),
            )

        else:
            assert False, f"Unhandled outcome type: {type(outcome)}"

    def _log_anomaly(self, data: bytes, output: str) -> None:
        logging.info(
            "Program input:\n%s\n%sProgram output:\n%s\n\n",
            data.decode("utf-8", errors="backslashreplace"),
            (
                util.hexdump("Hexdump:", data) + "\n"
                if len(data) < 200 and not util.printable(data)
                else ""
            ),
            util.indent(output.strip()),
        )

    def start(self) -> None:
        outcomes = self.run_all()

        logging.info(
            "Done. runs: %d, anomalies: %d, failures: %d",
            len(outcomes),
            len(
                [
                    o
                    for o in outcomes
                    if (isinstance(o, Completed) and o.anomalous) or isinstance(o, TimedOut)
                ],
            ),
            len([o for o in outcomes if isinstance(o, Failure)]),
        )

        sys.exit(0)
