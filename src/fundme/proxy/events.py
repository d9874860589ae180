"""
Proxy Events - notifications emitted by proxies

Events emitted by implementation code behind a proxy carry the proxy's
address, so indexers see a single stable emitter across upgrades.
"""

from pydantic import BaseModel


class ProxyInitialized(BaseModel):
    """The proxy's implementation pointer was written for the first time"""

    implementation: str
    initialized_by: str


class ProxyUpgraded(BaseModel):
    """The proxy now forwards to a different implementation"""

    previous_implementation: str
    implementation: str
    upgraded_by: str


PROXY_EVENT_TYPES = {
    "ProxyInitialized": ProxyInitialized,
    "ProxyUpgraded": ProxyUpgraded,
}
