"""Service layer: business operations called by the blueprints."""
