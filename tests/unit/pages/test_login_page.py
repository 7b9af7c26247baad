"""Unit tests for the login page object."""

import pytest

from dpcheck.core.config import Credentials, ScreenshotConfig
from dpcheck.core.exceptions import (
    ElementNotFoundException,
    LoginFailedException,
    ValidationException,
)
from dpcheck.pages.login_page import LoginPage
from tests.fixtures.driver import FakeDriver

CREDS = Credentials(base_url="https://app.example.com", username="qa@example.com", password="pw")
FORM = {LoginPage.EMAIL_INPUT, LoginPage.PASSWORD_INPUT, LoginPage.LOGIN_BUTTON}


def make_page(driver, tmp_path):
    return LoginPage(driver, screenshots=ScreenshotConfig(directory=str(tmp_path / "shots")))


@pytest.mark.asyncio
async def test_login_fills_and_submits_form(tmp_path):
    driver = FakeDriver(displayed=FORM)

    await make_page(driver, tmp_path).login(CREDS)

    assert driver.called("open") == ["https://app.example.com"]
    assert driver.values == {
        LoginPage.EMAIL_INPUT: "qa@example.com",
        LoginPage.PASSWORD_INPUT: "pw",
    }
    assert driver.called("click") == [LoginPage.LOGIN_BUTTON]
    assert driver.screenshots == []


@pytest.mark.asyncio
async def test_optional_dialogs_are_dismissed_when_present(tmp_path):
    driver = FakeDriver(
        displayed=FORM
        | {
            LoginPage.ENABLE_2FA_DIALOG,
            LoginPage.SKIP_2FA_LINK,
            LoginPage.GO_TO_DASHBOARD_BUTTON,
            LoginPage.TOOLTIP_CLOSE_BUTTON,
        }
    )

    await make_page(driver, tmp_path).login(CREDS)

    assert driver.called("click") == [
        LoginPage.LOGIN_BUTTON,
        LoginPage.SKIP_2FA_LINK,
        LoginPage.GO_TO_DASHBOARD_BUTTON,
        LoginPage.TOOLTIP_CLOSE_BUTTON,
    ]


@pytest.mark.asyncio
async def test_2fa_dialog_without_skip_link(tmp_path):
    driver = FakeDriver(displayed=FORM | {LoginPage.ENABLE_2FA_DIALOG})

    assert await make_page(driver, tmp_path).skip_2fa_setup() is False
    assert LoginPage.SKIP_2FA_LINK not in driver.called("click")


@pytest.mark.asyncio
async def test_form_error_raises_and_captures_screenshot(tmp_path):
    driver = FakeDriver(
        displayed=FORM | {LoginPage.ERROR_MESSAGE},
        texts={LoginPage.ERROR_MESSAGE: " Invalid email or password "},
    )

    with pytest.raises(LoginFailedException, match="Login failed: Invalid email or password"):
        await make_page(driver, tmp_path).login(CREDS)

    assert len(driver.screenshots) == 1
    shot = driver.screenshots[0]
    assert shot.parent == tmp_path / "shots"
    assert shot.name.startswith("login-error-")
    assert shot.suffix == ".png"


@pytest.mark.asyncio
async def test_missing_form_raises_element_not_found(tmp_path):
    driver = FakeDriver(displayed=set())

    with pytest.raises(ElementNotFoundException) as exc_info:
        await make_page(driver, tmp_path).login(CREDS)

    assert exc_info.value.selector == LoginPage.EMAIL_INPUT
    assert len(driver.screenshots) == 1


@pytest.mark.asyncio
async def test_screenshot_failure_does_not_mask_login_error(tmp_path):
    driver = FakeDriver(displayed=set(), errors={"save_screenshot": OSError("disk full")})

    with pytest.raises(ElementNotFoundException):
        await make_page(driver, tmp_path).login(CREDS)


@pytest.mark.asyncio
async def test_incomplete_credentials_fail_before_browsing(tmp_path):
    driver = FakeDriver(displayed=FORM)

    with pytest.raises(ValidationException, match="password"):
        await make_page(driver, tmp_path).login(Credentials(base_url="https://x", username="u"))

    assert driver.calls == []
