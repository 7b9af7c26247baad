"""Scenario step implementations."""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, Type

from dpcheck.core.config import ScenarioConfig, VerificationConfig
from dpcheck.core.context import TestContext
from dpcheck.core.exceptions import (
    ApiException,
    ConfigException,
    NetworkException,
    VerificationException,
)
from dpcheck.core.metrics import EventCounts
from dpcheck.core.retry import retry_with_policy
from dpcheck.core.services import ScenarioServices
from dpcheck.utils.logging import get_logger

Sleep = Callable[[float], Awaitable[None]]


class ScenarioStep(ABC):
    """Abstract base class for scenario steps."""

    def __init__(
        self,
        config: ScenarioConfig,
        context: TestContext,
        services: ScenarioServices,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.context = context
        self.services = services
        self.sleep = sleep
        self.logger = get_logger(f"step.{self.__class__.__name__}")

    @abstractmethod
    async def execute(self) -> None:
        """Execute the step."""
        raise NotImplementedError


class LoginStep(ScenarioStep):
    async def execute(self) -> None:
        await self.services.login_page.login(self.services.credentials)


class OpenConnectionsStep(ScenarioStep):
    async def execute(self) -> None:
        await self.services.connections_page.go_to_connections()


class StoreDataPlaneUrlStep(ScenarioStep):
    async def execute(self) -> None:
        url = await self.services.connections_page.read_data_plane_url()
        self.context.set_data_plane_url(url)


class StoreWriteKeyStep(ScenarioStep):
    async def execute(self) -> None:
        write_key = await self.services.connections_page.read_write_key()
        self.context.set_write_key(write_key)


class SendEventStep(ScenarioStep):
    """Send the configured payload, retrying transport and API failures."""

    async def execute(self) -> None:
        dispatcher = self.services.dispatcher

        async def send():
            return await dispatcher.send(self.config.payload_path, self.config.event_type)

        response = await retry_with_policy(
            send,
            self.config.retry,
            retry_on=(NetworkException, ApiException),
            sleep=self.sleep,
            log=self.logger,
        )
        self.context.set_test_data("last_response_status", response.status_code)
        self.logger.info(f"✅ Sample {self.config.event_type} event sent ({response.status_code})")


class OpenDestinationStep(ScenarioStep):
    async def execute(self) -> None:
        await self.services.connections_page.click_webhook_destination(
            self.config.destination_name
        )


class OpenEventsTabStep(ScenarioStep):
    async def execute(self) -> None:
        await self.services.connections_page.open_events_tab()


def check_thresholds(counts: EventCounts, verification: VerificationConfig) -> None:
    """Raise VerificationException when counts fall outside the configured bounds."""
    problems = []
    if verification.min_delivered is not None and counts.delivered < verification.min_delivered:
        problems.append(f"delivered {counts.delivered} < {verification.min_delivered}")
    if verification.max_failed is not None and counts.failed > verification.max_failed:
        problems.append(f"failed {counts.failed} > {verification.max_failed}")
    if problems:
        raise VerificationException(f"Event counts out of bounds: {'; '.join(problems)}")


class ReadEventCountsStep(ScenarioStep):
    """Scrape delivered/failed counts; re-scrape while thresholds are not met yet."""

    async def execute(self) -> None:
        page = self.services.connections_page
        verification = self.config.verification

        async def read() -> EventCounts:
            counts = await page.get_event_counts()
            self.context.set_test_data("event_counts", counts)
            check_thresholds(counts, verification)
            return counts

        if verification.enabled:
            counts = await retry_with_policy(
                read,
                self.config.retry,
                retry_on=(VerificationException,),
                sleep=self.sleep,
                log=self.logger,
            )
        else:
            counts = await read()

        self.logger.info(f"📊 Delivered Events: {counts.delivered}")
        self.logger.info(f"📊 Failed Events: {counts.failed}")


class StepFactory:
    """Factory for creating scenario steps."""

    _steps: Dict[str, Type[ScenarioStep]] = {
        "login": LoginStep,
        "open_connections": OpenConnectionsStep,
        "store_data_plane_url": StoreDataPlaneUrlStep,
        "store_write_key": StoreWriteKeyStep,
        "send_event": SendEventStep,
        "open_destination": OpenDestinationStep,
        "open_events_tab": OpenEventsTabStep,
        "read_event_counts": ReadEventCountsStep,
    }

    @classmethod
    def names(cls):
        return tuple(cls._steps)

    def create_step(
        self,
        step_name: str,
        config: ScenarioConfig,
        context: TestContext,
        services: ScenarioServices,
        sleep: Sleep = asyncio.sleep,
    ) -> ScenarioStep:
        if step_name not in self._steps:
            raise ConfigException(f"Unknown scenario step: {step_name}")
        return self._steps[step_name](config, context, services, sleep=sleep)
