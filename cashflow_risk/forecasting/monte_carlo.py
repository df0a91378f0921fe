"""
Monte Carlo Risk Simulator

Simulates compounding cash flow paths with normally distributed
period returns and summarizes the distribution of final values.

Paths are independent, so the work can be sharded across threads; each
shard draws from its own child generator spawned from a per-run generator,
which keeps results reproducible for a given seed and worker count.
"""

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence
import numpy as np

from .confidence import calculate_volatility, mean_return
from .models import MonteCarloResult

logger = logging.getLogger(__name__)

PERCENTILES = {
    "p5": 0.05,
    "p25": 0.25,
    "p50": 0.50,
    "p75": 0.75,
    "p95": 0.95,
}


def box_muller(rng: np.random.Generator, size, mean: float, volatility: float) -> np.ndarray:
    """Normal draws from pairs of uniforms via the Box-Muller transform"""
    u1 = 1.0 - rng.random(size)  # (0, 1], keeps log finite
    u2 = rng.random(size)
    z0 = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
    return mean + volatility * z0


def empty_result() -> MonteCarloResult:
    return MonteCarloResult(
        path_values=[],
        percentiles={name: 0.0 for name in PERCENTILES},
        mean=0.0,
        std_dev=0.0,
        probability_of_negative=0.0,
        simulation_count=0
    )


class MonteCarloSimulator:
    """
    Runs stochastic compounding paths seeded from a forecast.

    Example:
    ```python
    simulator = MonteCarloSimulator(simulation_count=10000, seed=42)
    result = simulator.simulate(forecast=[1000, 1050, 1100], returns=[0.02, -0.01, 0.03])
    print(result.percentiles["p5"], result.probability_of_negative)
    ```
    """

    def __init__(
        self,
        simulation_count: int = 10000,
        seed: Optional[int] = None,
        workers: int = 1,
        batch_size: int = 2000,
        time_budget: Optional[float] = None
    ):
        """
        Initialize simulator.

        Args:
            simulation_count: Number of paths per run
            seed: Seed for the generator built at the start of every run;
                None draws fresh entropy each run
            workers: Threads to shard paths across
            batch_size: Paths generated per vectorized batch
            time_budget: Seconds after which remaining batches are skipped
        """
        if simulation_count < 1:
            raise ValueError("simulation_count must be at least 1")
        if workers < 1:
            raise ValueError("workers must be at least 1")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.simulation_count = simulation_count
        self.workers = workers
        self.batch_size = batch_size
        self.time_budget = time_budget
        self.seed = seed

    def simulate(
        self,
        forecast: Sequence[float],
        returns: Sequence[float],
        rng: Optional[np.random.Generator] = None
    ) -> MonteCarloResult:
        """
        Simulate final values over the forecast horizon.

        Args:
            forecast: Adjusted forecast; its first value seeds every path and
                its length sets the horizon
            returns: Historical period returns (mean and volatility source)
            rng: Generator for this run only; a new one is built from the
                simulator's seed when omitted

        Returns:
            MonteCarloResult over the completed paths
        """
        if len(forecast) == 0:
            return empty_result()

        if rng is None:
            rng = np.random.default_rng(self.seed)

        mu = mean_return(returns)
        sigma = calculate_volatility(returns)
        start = float(forecast[0])
        steps = len(forecast) - 1
        deadline = time.monotonic() + self.time_budget if self.time_budget is not None else None

        shard_sizes = self._shard_sizes()
        if len(shard_sizes) == 1:
            finals = [self._run_shard(rng, shard_sizes[0], start, steps, mu, sigma, deadline)]
        else:
            generators = rng.spawn(len(shard_sizes))
            with ThreadPoolExecutor(max_workers=len(shard_sizes)) as pool:
                futures = [
                    pool.submit(self._run_shard, gen, size, start, steps, mu, sigma, deadline)
                    for gen, size in zip(generators, shard_sizes)
                ]
                finals = [f.result() for f in futures]

        final_values = np.concatenate(finals)
        if len(final_values) < self.simulation_count:
            logger.warning(
                f"Monte Carlo time budget reached: {len(final_values)}/{self.simulation_count} paths simulated"
            )

        return self._summarize(final_values)

    def _shard_sizes(self) -> List[int]:
        """Split the path count as evenly as possible across workers"""
        workers = min(self.workers, self.simulation_count)
        base, extra = divmod(self.simulation_count, workers)
        return [base + (1 if i < extra else 0) for i in range(workers)]

    def _run_shard(
        self,
        rng: np.random.Generator,
        paths: int,
        start: float,
        steps: int,
        mu: float,
        sigma: float,
        deadline: Optional[float]
    ) -> np.ndarray:
        """Simulate one shard of paths in batches"""
        results = []
        done = 0
        while done < paths:
            size = min(self.batch_size, paths - done)
            draws = box_muller(rng, (size, steps), mu, sigma)
            results.append(start * np.prod(1.0 + draws, axis=1))
            done += size
            if deadline is not None and time.monotonic() >= deadline:
                break
        return np.concatenate(results)

    def _summarize(self, final_values: np.ndarray) -> MonteCarloResult:
        n = len(final_values)
        ordered = np.sort(final_values)

        percentiles = {
            name: float(ordered[min(int(math.floor(n * p)), n - 1)])
            for name, p in PERCENTILES.items()
        }

        return MonteCarloResult(
            path_values=final_values.tolist(),
            percentiles=percentiles,
            mean=float(np.mean(final_values)),
            std_dev=float(np.std(final_values)),
            probability_of_negative=float(np.count_nonzero(final_values < 0) / n),
            simulation_count=n
        )
