from dpcheck.pages.connections_page import ConnectionsPage
from dpcheck.pages.login_page import LoginPage

__all__ = ["ConnectionsPage", "LoginPage"]
