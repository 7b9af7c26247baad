from dpcheck.browser.driver import BrowserDriver

__all__ = ["BrowserDriver"]
