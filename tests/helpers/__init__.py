from .topo import START_MS, InMemTopo, StaticDiscovery, WildcardInMemTopo

__all__ = [
    "START_MS",
    "InMemTopo",
    "StaticDiscovery",
    "WildcardInMemTopo",
]
