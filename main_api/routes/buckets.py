"""S3 bucket listing, forwarded to the auxiliary service."""
from flask import Blueprint

from main_api.routes import forwarding

buckets_bp = Blueprint("buckets", __name__)


@buckets_bp.route("/api/s3/buckets", methods=["GET"], strict_slashes=False)
def list_buckets():
    return forwarding.forward_to_auxiliary("/aws/s3/buckets")
