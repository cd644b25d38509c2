"""
Generation orchestrator.

Runs one generation: load the contract, normalize it once, validate every
target's configuration, then fan out one (emit -> assemble) task per target.

Orchestration Contract
1) Load or normalize failure: the run is FAILED and no target runs.
2) Config-file failure (unreadable, not a mapping): the run is FAILED.
3) A target whose options fail validation is FAILED; the others run.
4) Anything a target task raises is recorded on that target only.
5) Each target has its own CancellationToken. A task that outlives its
   timeout is cancelled through the token and recorded as TIMED_OUT; the
   task discards its own staging directory when it observes cancellation.
   A task that already committed its package is left to finish.
6) The run is DONE when at least one target succeeded, else FAILED.

Targets run on a ThreadPoolExecutor (one worker per target by default) or
one after another with ``parallel=False``. The NormalizedIR is shared
read-only; each target writes only under ``out_dir/<target>``.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, List, Mapping, Optional

from tqdm import tqdm

from contractgen.assembly import assemble
from contractgen.cancellation import CancellationToken
from contractgen.config import GeneratorConfig, build_target_config, load_target_options, normalize_target_name
from contractgen.constants import (
    STATE_ASSEMBLING,
    STATE_DONE,
    STATE_EMITTING,
    STATE_FAILED,
    STATE_IDLE,
    STATE_LOADING,
    STATE_NORMALIZING,
    STATUS_ASSEMBLING,
    STATUS_EMITTING,
    STATUS_FAILED,
    STATUS_SUCCEEDED,
    STATUS_TIMED_OUT,
)
from contractgen.emitters import Emitter, get_emitter
from contractgen.errors import ConfigError, ContractGenError, TargetTimeoutError
from contractgen.loader import load
from contractgen.normalize import normalize
from contractgen.report import GenerationReport, TargetOutcome
from contractgen.schemas.contract import NormalizedIR, TargetConfig

logger = logging.getLogger(__name__)

# Seconds between deadline checks while waiting on target tasks
POLL_INTERVAL = 0.05

STATE_RANK = {
    STATE_IDLE: 0,
    STATE_LOADING: 1,
    STATE_NORMALIZING: 2,
    STATE_EMITTING: 3,
    STATE_ASSEMBLING: 4,
}


class Orchestrator:
    """
    Drives one generation run.

    Args:
        config: Run configuration.
        emitters: Optional target -> Emitter overrides (aliases accepted);
            targets not listed use the registered emitter.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        emitters: Optional[Mapping[str, Emitter]] = None,
    ):
        self.config = config
        self.report = GenerationReport()
        self._emitters: Dict[str, Emitter] = {
            normalize_target_name(name): emitter for name, emitter in (emitters or {}).items()
        }
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        return self.report.state

    def _advance(self, state: str) -> None:
        with self._lock:
            if STATE_RANK.get(state, 99) > STATE_RANK.get(self.report.state, 99):
                self.report.state = state

    # =========================================================================
    # RUN
    # =========================================================================

    def run(self) -> GenerationReport:
        """Run every requested target and return the report."""
        config = self.config
        logger.info(f"Generating {', '.join(config.targets)} from {config.spec_path}")

        try:
            self._advance(STATE_LOADING)
            document = load(config.spec_path)
            self._advance(STATE_NORMALIZING)
            ir = normalize(document)
            options = load_target_options(config.config_path, config.targets)
        except ContractGenError as e:
            logger.error(f"Generation aborted in {self.report.state}: {e}")
            self.report.state = STATE_FAILED
            self.report.error = str(e)
            return self.report
        self.report.fingerprint = ir.fingerprint

        runnable: Dict[str, TargetConfig] = {}
        for target in config.targets:
            outcome = TargetOutcome(target=target)
            self.report.outcomes[target] = outcome
            try:
                runnable[target] = build_target_config(target, options[target])
            except ConfigError as e:
                logger.error(f"{target}: invalid configuration: {e}")
                outcome.status = STATUS_FAILED
                outcome.reason = str(e)

        if runnable:
            config.out_dir.mkdir(parents=True, exist_ok=True)
            self._advance(STATE_EMITTING)
            if config.parallel and len(runnable) > 1:
                self._run_parallel(ir, runnable)
            else:
                self._run_sequential(ir, runnable)

        self.report.state = STATE_DONE if self.report.succeeded else STATE_FAILED
        logger.info(
            f"Generation {self.report.state.lower()}: "
            f"{len(self.report.succeeded)}/{len(self.report.outcomes)} targets succeeded"
        )
        return self.report

    # =========================================================================
    # TARGET TASK
    # =========================================================================

    def _emitter_for(self, target: str) -> Emitter:
        return self._emitters.get(target) or get_emitter(target)

    def _run_target(
        self,
        ir: NormalizedIR,
        tconfig: TargetConfig,
        outcome: TargetOutcome,
        token: CancellationToken,
    ) -> TargetOutcome:
        """Emit and assemble one target. Never raises."""
        target = tconfig.target
        token.start()
        started = time.monotonic()
        outcome.config_warnings = tconfig.warnings
        try:
            outcome.status = STATUS_EMITTING
            result = self._emitter_for(target).emit(ir, tconfig, token)
            outcome.warnings = result.warnings
            if not result.success:
                outcome.status = STATUS_FAILED
                outcome.reason = "; ".join(result.errors) or "emission failed"
                return outcome

            outcome.status = STATUS_ASSEMBLING
            self._advance(STATE_ASSEMBLING)
            outcome.package = assemble(result, tconfig, self.config.out_dir, token)
            outcome.status = STATUS_SUCCEEDED
        except TargetTimeoutError as e:
            logger.error(f"{target}: {e}")
            outcome.status = STATUS_TIMED_OUT
            outcome.reason = str(e)
        except ContractGenError as e:
            logger.error(f"{target}: {e}")
            outcome.status = STATUS_FAILED
            outcome.reason = str(e)
        except Exception as e:
            logger.exception(f"{target}: unexpected error")
            outcome.status = STATUS_FAILED
            outcome.reason = f"{type(e).__name__}: {e}"
        finally:
            outcome.duration_seconds = time.monotonic() - started
        return outcome

    def _progress(self, total: int) -> tqdm:
        return tqdm(
            total=total,
            desc="targets",
            unit="target",
            disable=not self.config.show_progress,
            leave=False,
        )

    def _run_sequential(self, ir: NormalizedIR, runnable: Dict[str, TargetConfig]) -> None:
        with self._progress(len(runnable)) as bar:
            for target, tconfig in runnable.items():
                token = CancellationToken(target, self.config.timeout_seconds)
                outcome = self._run_target(ir, tconfig, self.report.outcomes[target], token)
                bar.set_postfix_str(outcome.line())
                bar.update(1)

    def _run_parallel(self, ir: NormalizedIR, runnable: Dict[str, TargetConfig]) -> None:
        timeout = self.config.timeout_seconds
        workers = self.config.max_workers or len(runnable)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="contractgen")

        futures: Dict[Future, str] = {}
        tokens: Dict[str, CancellationToken] = {}
        for target, tconfig in runnable.items():
            token = CancellationToken(target, timeout)
            tokens[target] = token
            future = executor.submit(self._run_target, ir, tconfig, self.report.outcomes[target], token)
            futures[future] = target

        pending = set(futures)
        abandoned: List[Future] = []
        try:
            with self._progress(len(futures)) as bar:
                while pending:
                    done, pending = wait(pending, timeout=POLL_INTERVAL, return_when=FIRST_COMPLETED)
                    for future in done:
                        bar.set_postfix_str(future.result().line())
                        bar.update(1)

                    for future in sorted(pending, key=futures.get):
                        if future.done():
                            continue
                        target = futures[future]
                        reason = str(TargetTimeoutError(target, timeout))
                        if tokens[target].expired and self._time_out(target, tokens[target], reason):
                            pending.discard(future)
                            abandoned.append(future)
                            bar.update(1)

                    # Timed-out tasks that never return hold their worker threads
                    stuck = [f for f in abandoned if f.running()]
                    if pending and len(stuck) >= workers:
                        for future in sorted(pending, key=futures.get):
                            if future.cancel():
                                target = futures[future]
                                self._time_out(
                                    target,
                                    tokens[target],
                                    "cancelled: every worker is held by a timed-out target",
                                )
                                pending.discard(future)
                                bar.update(1)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _time_out(self, target: str, token: CancellationToken, reason: str) -> bool:
        """
        Cancel a target and detach its outcome from the still-running task.

        Returns False, leaving the outcome to the task, when the task already
        committed its package.
        """
        if not token.cancel():
            logger.debug(f"{target}: deadline passed after commit; waiting for the swap")
            return False
        logger.error(f"{target}: {reason}")
        self.report.outcomes[target] = TargetOutcome(
            target=target,
            status=STATUS_TIMED_OUT,
            reason=reason,
            warnings=self.report.outcomes[target].warnings,
            duration_seconds=self.config.timeout_seconds,
        )
        return True


def generate(
    config: GeneratorConfig,
    emitters: Optional[Mapping[str, Emitter]] = None,
) -> GenerationReport:
    """Run one generation with ``config`` and return its report."""
    return Orchestrator(config, emitters=emitters).run()


__all__ = ["Orchestrator", "generate"]
