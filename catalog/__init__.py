"""
catalog: collaborators and wiring around the gamefeed core.

- config: ServiceConfig loaded from environment / .env
- services/: upstream catalog provider, store-link lookup, UpstreamError
- state: AppState builds providers, persisted stores, and feed sessions
"""
