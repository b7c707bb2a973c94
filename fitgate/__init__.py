"""fitgate — Fitbit Web API gateway.

Subpackages:
    fitbit/     — Credential store, request pipeline, normalizers, reports
    routers/    — FastAPI route bindings over the report operations
    middleware/ — API key check for the HTTP surface
    services/   — Managed secret store access
"""
