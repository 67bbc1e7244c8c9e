from main_api.routes.buckets import buckets_bp
from main_api.routes.health import health_bp
from main_api.routes.parameters import parameters_bp

blueprints = (health_bp, buckets_bp, parameters_bp)
