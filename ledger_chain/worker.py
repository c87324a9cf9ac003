"""
Background mining for the commission ledger.

Mining is CPU-bound, so request handlers only stage transactions and this
worker seals them on its own thread, either every `interval` seconds or as
soon as trigger() is called. An operator can pause() and resume() it; a
pass that has already started always runs to completion.

Usage:
    worker = MiningWorker(ledger, miner_identity="scheduler")
    worker.start()
    ...
    worker.trigger()   # seal now instead of waiting for the interval
    worker.stop()
"""

from typing import Callable, Optional
import logging
import threading

from ledger_core.errors import EmptyPendingPoolError
from .chain import Ledger

logger = logging.getLogger(__name__)


class MiningWorker:
    """
    Seals the pending pool on a daemon thread.

    Attributes:
        ledger (Ledger): Ledger to mine
        miner_identity (str): Identity recorded on sealed blocks
        interval (float): Seconds between scheduled passes
        blocks_sealed (int): Blocks sealed by this worker
        last_block_hash (Optional[str]): Hash of the last block it sealed
    """

    def __init__(
        self,
        ledger: Ledger,
        miner_identity: str = "system",
        interval: Optional[float] = None,
        on_sealed: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize the worker (not started).

        Args:
            ledger: Ledger to mine
            miner_identity: Identity recorded on sealed blocks
            interval: Seconds between passes, defaults to config.mining_interval_seconds
            on_sealed: Optional callback receiving each new block hash
        """
        self.ledger = ledger
        self.miner_identity = miner_identity
        self.interval = interval or ledger.config.mining_interval_seconds
        self._on_sealed = on_sealed

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._paused = threading.Event()

        self.blocks_sealed = 0
        self.last_block_hash: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_paused(self) -> bool:
        return self._paused.is_set()

    def start(self) -> None:
        """
        Start the mining thread.

        If a previous stop() timed out, waits for that loop to finish its
        in-flight pass first, so at most one loop ever runs.
        """
        if self.is_running:
            if not self._stop_event.is_set():
                return
            self._thread.join()

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="CommissionLedger-Miner"
        )
        self._thread.start()
        logger.info(f"Mining worker started (interval={self.interval}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the mining thread, letting an in-flight pass finish."""
        self._stop_event.set()
        self._wake_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(
                    f"Mining worker still finishing a pass after {timeout}s"
                )
                return
            self._thread = None
        logger.info("Mining worker stopped")

    def pause(self) -> None:
        """Skip scheduled and triggered passes until resume()."""
        self._paused.set()
        logger.info("Mining worker paused")

    def resume(self) -> None:
        self._paused.clear()
        self._wake_event.set()
        logger.info("Mining worker resumed")

    def trigger(self) -> None:
        """Run a pass as soon as possible."""
        self._wake_event.set()

    def run_once(self) -> Optional[str]:
        """
        Run one mining pass on the calling thread.

        Returns:
            Hash of the sealed block, or None if the pool was empty
        """
        try:
            block_hash = self.ledger.seal(self.miner_identity)
        except EmptyPendingPoolError:
            logger.debug("Nothing to mine")
            return None

        self.blocks_sealed += 1
        self.last_block_hash = block_hash
        if self._on_sealed:
            self._on_sealed(block_hash)
        return block_hash

    def _run_loop(self) -> None:
        """Main mining loop."""
        while not self._stop_event.is_set():
            self._wake_event.wait(timeout=self.interval)
            self._wake_event.clear()

            if self._stop_event.is_set():
                break
            if self._paused.is_set():
                continue

            try:
                self.run_once()
            except Exception:
                logger.exception("Mining pass failed")
