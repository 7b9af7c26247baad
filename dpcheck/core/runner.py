"""Core scenario runner that owns the browser session for one run."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncContextManager, Callable, Dict, List, Optional, Union

from dpcheck.browser.driver import BrowserDriver
from dpcheck.core.config import BrowserConfig, ScenarioConfig
from dpcheck.core.flow import ScenarioFlow
from dpcheck.utils.logging import get_logger

DriverFactory = Callable[[BrowserConfig], AsyncContextManager[BrowserDriver]]


@dataclass
class ScenarioResult:
    """Result of a scenario execution."""

    name: str
    success: bool
    duration: float
    metrics: Dict[str, Any]
    errors: List[str] = field(default_factory=list)
    screenshots: List[str] = field(default_factory=list)


def compute_duration(metrics: Dict[str, Any]) -> float:
    """Prefer wall-clock time; otherwise sum the per-step durations."""
    wall_time = metrics.get("total_duration_wall_clock")
    if isinstance(wall_time, (int, float)):
        return float(wall_time)

    return sum(
        float(value)
        for key, value in metrics.items()
        if key.endswith("_duration")
        and isinstance(value, (int, float))
        and not isinstance(value, bool)
    )


def _default_driver_factory(config: BrowserConfig) -> AsyncContextManager[BrowserDriver]:
    from dpcheck.browser.playwright_driver import launch_driver

    return launch_driver(config)


class ScenarioRunner:
    """Runs one scenario in a fresh browser session and reports the outcome."""

    def __init__(
        self,
        config: Union[ScenarioConfig, str, Path],
        run_id: Optional[str] = None,
        driver_factory: DriverFactory = _default_driver_factory,
        **flow_kwargs: Any,
    ):
        """Initialize the runner.

        Args:
            config: Scenario configuration or path to its YAML file
            run_id: Optional run ID for tracking
            driver_factory: Async context manager factory yielding a browser driver
            **flow_kwargs: Extra ScenarioFlow arguments (context, dispatcher, sleep, listeners)
        """
        if isinstance(config, ScenarioConfig):
            self.config = config
        else:
            self.config = ScenarioConfig.from_file(config)
        self.run_id = run_id
        self.driver_factory = driver_factory
        self.flow_kwargs = flow_kwargs
        self.logger = get_logger("scenario_runner")

    async def run(self) -> ScenarioResult:
        self.logger.info(f"🚀 Starting scenario: {self.config.name}")
        if self.config.description:
            self.logger.info(f"📝 Description: {self.config.description}")

        flow: Optional[ScenarioFlow] = None
        errors: List[str] = []
        success = False
        metrics: Dict[str, Any] = {}
        screenshots: List[str] = []

        try:
            async with self.driver_factory(self.config.browser) as driver:
                flow = ScenarioFlow(self.config, driver, run_id=self.run_id, **self.flow_kwargs)
                try:
                    await flow.execute()
                    success = True
                finally:
                    metrics = flow.get_metrics()
                    screenshots = list(flow.screenshots)
                    await flow.cleanup()
        except Exception as e:
            self.logger.error(f"❌ Scenario failed: {e}")
            errors.append(str(e))

        return ScenarioResult(
            name=self.config.name,
            success=success,
            duration=compute_duration(metrics),
            metrics=metrics,
            errors=errors,
            screenshots=screenshots,
        )
