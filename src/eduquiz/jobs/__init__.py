"""Background jobs."""

from .daily_rewards import run_rewards_once, shutdown_scheduler, start_scheduler

__all__ = ["run_rewards_once", "shutdown_scheduler", "start_scheduler"]
