"""Dashboard login page."""

from dpcheck.core.config import Credentials
from dpcheck.core.exceptions import LoginFailedException
from dpcheck.pages.base_page import BasePage
from dpcheck.utils.logging import mask_username


class LoginPage(BasePage):
    EMAIL_INPUT = 'input[data-testid="Email"]'
    PASSWORD_INPUT = 'input[data-testid="Password"]'
    LOGIN_BUTTON = "button.ant-btn-primary"
    ERROR_MESSAGE = ".ant-form-item-explain-error"
    ENABLE_2FA_DIALOG = "xpath=//div[contains(text(), 'Add an extra layer of security')]"
    SKIP_2FA_LINK = "xpath=//a[text()=\"I'll do this later\"]"
    GO_TO_DASHBOARD_BUTTON = "xpath=//button[.//span[text()='Go to dashboard']]"
    TOOLTIP_CLOSE_BUTTON = ".__floater__body svg"

    async def login(self, credentials: Credentials) -> None:
        """Log in and dismiss the optional 2FA, dashboard and onboarding dialogs.

        A ``login-error`` screenshot is taken before any failure propagates.
        """
        credentials.require_complete()

        self.logger.info("🔑 Starting login process...")
        self.logger.info(f"Base URL: {credentials.base_url}")
        self.logger.info(f"Username: {mask_username(credentials.username)}")

        try:
            await self.driver.open(credentials.base_url)

            await self.require(self.EMAIL_INPUT)
            await self.driver.set_value(
                self.EMAIL_INPUT, credentials.username, self.timeouts.default_wait_ms
            )
            await self.require(self.PASSWORD_INPUT)
            await self.driver.set_value(
                self.PASSWORD_INPUT, credentials.password, self.timeouts.default_wait_ms
            )

            await self.click(self.LOGIN_BUTTON)
            self.logger.info("✓ Login form submitted")

            await self._raise_on_form_error()
            await self.skip_2fa_setup()
            await self.go_to_dashboard()
            await self.close_onboarding_tooltips()

            self.logger.info("✅ Login completed successfully")
        except Exception as e:
            self.logger.error(f"❌ Login failed: {e}")
            await self._capture_failure()
            raise

    async def _raise_on_form_error(self) -> None:
        if await self.probe(self.ERROR_MESSAGE, self.timeouts.login_error_probe_ms):
            text = await self.driver.get_text(self.ERROR_MESSAGE, self.timeouts.short_wait_ms)
            raise LoginFailedException(f"Login failed: {text.strip()}")

    async def skip_2fa_setup(self) -> bool:
        if not await self.probe(self.ENABLE_2FA_DIALOG, self.timeouts.optional_dialog_ms):
            self.logger.info("ℹ️ 2FA setup not required")
            return False

        self.logger.info("📱 2FA setup dialog detected")
        if await self.driver.is_displayed(self.SKIP_2FA_LINK):
            await self.driver.click(self.SKIP_2FA_LINK, self.timeouts.default_wait_ms)
            self.logger.info("✓ Skipped 2FA setup")
            return True
        return False

    async def go_to_dashboard(self) -> bool:
        if not await self.probe(self.GO_TO_DASHBOARD_BUTTON, self.timeouts.optional_dialog_ms):
            self.logger.info("ℹ️ Already on dashboard")
            return False
        await self.driver.click(self.GO_TO_DASHBOARD_BUTTON, self.timeouts.default_wait_ms)
        self.logger.info("✓ Navigated to dashboard")
        return True

    async def close_onboarding_tooltips(self) -> bool:
        if not await self.probe(self.TOOLTIP_CLOSE_BUTTON, self.timeouts.short_wait_ms):
            self.logger.info("ℹ️ No onboarding tooltips to close")
            return False
        await self.driver.click(self.TOOLTIP_CLOSE_BUTTON, self.timeouts.default_wait_ms)
        self.logger.info("✓ Closed onboarding tooltip")
        return True

    async def _capture_failure(self) -> None:
        try:
            await self.take_screenshot("login-error")
        except Exception as e:
            self.logger.warning(f"⚠️ Could not capture login screenshot: {e}")
