from . import auth, dashboard, invites, maintenance, properties, tenants

BLUEPRINTS = (
    auth.bp,
    invites.bp,
    properties.bp,
    tenants.bp,
    maintenance.bp,
    dashboard.bp,
)


def register_blueprints(app):
    """Register all API blueprints under the API prefix."""
    url_prefix = app.config.get("API_PREFIX", "/api")
    for bp in BLUEPRINTS:
        app.register_blueprint(bp, url_prefix=url_prefix)
        app.logger.debug("Registered blueprint %s at %s", bp.name, url_prefix)
