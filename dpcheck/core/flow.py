"""Scenario flow execution engine with structured events."""

import asyncio
import time
from typing import Any, Dict, List, Optional, Sequence

from dpcheck.browser.driver import BrowserDriver
from dpcheck.core.config import ScenarioConfig
from dpcheck.core.context import TestContext
from dpcheck.core.dispatcher import EventDispatcher
from dpcheck.core.events import EventBus, EventType, Listener
from dpcheck.core.services import ScenarioServices, initialize_services
from dpcheck.core.steps import Sleep, StepFactory
from dpcheck.utils.logging import get_logger
from dpcheck.utils.timestamp import random_string


class ScenarioFlow:
    """Executes the configured steps of one scenario against one browser session."""

    def __init__(
        self,
        config: ScenarioConfig,
        driver: BrowserDriver,
        run_id: Optional[str] = None,
        context: Optional[TestContext] = None,
        dispatcher: Optional[EventDispatcher] = None,
        sleep: Sleep = asyncio.sleep,
        listeners: Sequence[Listener] = (),
    ):
        self.config = config
        self.driver = driver
        self.context = context or TestContext()
        self.run_id = run_id or f"{config.name}-{random_string(6).lower()}"
        self.logger = get_logger(f"flow.{config.name}")
        self.step_factory = StepFactory()
        self.sleep = sleep
        self.metrics: Dict[str, Any] = {}
        self.errors: List[str] = []
        self.screenshots: List[str] = []
        self._dispatcher = dispatcher
        self._services: Optional[ScenarioServices] = None
        self._step_idx = 0
        self.events = EventBus(self.run_id, config.name)
        for listener in listeners:
            self.events.subscribe(listener)

    @property
    def services(self) -> ScenarioServices:
        if self._services is None:
            self._services = initialize_services(
                self.config, self.context, self.driver, dispatcher=self._dispatcher
            )
        return self._services

    async def execute(self) -> None:
        """Run every step in order; the first failing step aborts the flow."""
        self.logger.info(f"🚀 Executing scenario: {self.config.name}")
        self.logger.info(f"🔄 Steps: {self.config.steps}")
        await self.events.publish(EventType.FLOW_STARTED, steps=tuple(self.config.steps))

        flow_start = time.time()
        try:
            for step_name in self.config.steps:
                await self._execute_step(step_name)
        except Exception as e:
            self.metrics["total_duration_wall_clock"] = time.time() - flow_start
            self.errors.append(str(e))
            self.logger.error(f"❌ Scenario failed: {e}")
            await self.events.publish(EventType.FLOW_FAILED, error=str(e))
            raise

        self.metrics["total_duration_wall_clock"] = time.time() - flow_start
        self.logger.info(f"✅ Scenario completed: {self.config.name}")
        await self.events.publish(EventType.FLOW_COMPLETED)

    async def _execute_step(self, step_name: str) -> None:
        self._step_idx += 1
        idx = self._step_idx
        self.logger.info(f"🔄 Executing step: {step_name}")
        await self.events.publish(EventType.STEP_STARTED, step=step_name, index=idx)

        step = self.step_factory.create_step(
            step_name, self.config, self.context, self.services, sleep=self.sleep
        )
        start_time = time.time()

        try:
            await step.execute()
        except Exception as e:
            duration = time.time() - start_time
            self.metrics[f"{idx:02d}_{step_name}_duration"] = duration
            self.metrics[f"{idx:02d}_{step_name}_failed"] = True
            await self._capture_failure(step_name)
            await self.events.publish(
                EventType.STEP_FAILED, step=step_name, index=idx, duration=duration, error=str(e)
            )
            raise

        duration = time.time() - start_time
        self.metrics[f"{idx:02d}_{step_name}_duration"] = duration
        self.logger.info(f"✅ Step {step_name} completed in {duration:.2f}s")
        await self.events.publish(
            EventType.STEP_COMPLETED, step=step_name, index=idx, duration=duration
        )

    async def _capture_failure(self, step_name: str) -> None:
        if not self.config.screenshots.on_failure:
            return
        try:
            path = await self.services.login_page.take_screenshot(f"{step_name}-failure")
            self.screenshots.append(str(path))
        except Exception as e:
            self.logger.warning(f"⚠️ Failure screenshot not captured: {e}")

    def get_metrics(self) -> Dict[str, Any]:
        metrics = self.metrics.copy()
        if self.context.has_test_data("event_counts"):
            counts = self.context.get_test_data("event_counts")
            metrics["delivered"] = counts.delivered
            metrics["failed"] = counts.failed
        return metrics

    async def cleanup(self) -> None:
        """Clear captured state so nothing leaks into a later run."""
        self.context.clear_all()
        self.logger.info("🧹 Scenario context cleared")

