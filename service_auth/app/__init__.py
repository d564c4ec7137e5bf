"""
Auth Service package.

Validates signed compact tokens against a shared secret or a public key
resolved from a key store, and exposes that over HTTP.

- app.main: Application entrypoint that wires routes and lifecycle.
- app.validation: Token decoding, algorithm dispatch, signature checks.
- app.keystore: The key store contract and the in-memory store.
- app.jwks: JWKS endpoint backed key store.

Design notes:
- Module import must not perform network calls or crypto initialisation.
  Backends are brought up from ``AuthService`` startup.
- Use the shared/ utilities for logging, metrics, config, and errors.
- Validation keeps no state between calls.
"""
