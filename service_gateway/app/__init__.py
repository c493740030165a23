"""
Edge gateway service package.

The gateway sits behind Cloudflare Access and in front of the moltbot
container:
- Authentication: Cloudflare Access tokens verified against the team's JWKS
- Environment: worker inputs resolved into the container's variables

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.auth: Access token verification, key sources, request middleware.
- app.environment: Provider slot selection and environment resolution.
"""
