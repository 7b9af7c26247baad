"""Per-run collaborators shared by the scenario steps."""

from dataclasses import dataclass
from typing import Optional

from dpcheck.browser.driver import BrowserDriver
from dpcheck.core.config import Credentials, ScenarioConfig
from dpcheck.core.context import TestContext
from dpcheck.core.dispatcher import EventDispatcher
from dpcheck.pages.connections_page import ConnectionsPage
from dpcheck.pages.login_page import LoginPage
from dpcheck.utils.logging import get_logger

logger = get_logger("services")


@dataclass
class ScenarioServices:
    driver: BrowserDriver
    credentials: Credentials
    login_page: LoginPage
    connections_page: ConnectionsPage
    dispatcher: EventDispatcher


def initialize_services(
    config: ScenarioConfig,
    context: TestContext,
    driver: BrowserDriver,
    dispatcher: Optional[EventDispatcher] = None,
) -> ScenarioServices:
    """Wire pages and the dispatcher for one run.

    Args:
        config: Scenario configuration
        context: The run's context, shared by reference with the dispatcher
        driver: Browser driver for the run
        dispatcher: Optional pre-built dispatcher (tests inject one with a mock transport)
    """
    env = config.environment_config()
    logger.info(f"🌍 Environment: {env.environment}")

    services = ScenarioServices(
        driver=driver,
        credentials=env.credentials(),
        login_page=LoginPage(driver, config.timeouts, config.screenshots),
        connections_page=ConnectionsPage(
            driver, config.timeouts, config.screenshots, config.scrape
        ),
        dispatcher=dispatcher
        or EventDispatcher(context, timeout=config.timeouts.api_request_ms / 1000),
    )
    logger.info("✅ Initialized pages and event dispatcher")
    return services
