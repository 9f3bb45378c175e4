"""HTTP routers, each built by a factory with its dependencies injected."""
