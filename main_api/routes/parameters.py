"""Parameter store endpoints, forwarded to the auxiliary service."""
from flask import Blueprint, request

from main_api.routes import forwarding

parameters_bp = Blueprint("parameters", __name__)


def parameter_lookup_status(error):
    """404 when the downstream reports the parameter as missing, else 500.

    The downstream gives no structured error kind, so this is a
    case-sensitive substring check on the message.
    """
    return 404 if "not found" in error.message else 500


@parameters_bp.route("/api/parameters", methods=["GET"], strict_slashes=False)
def get_parameter_value():
    # A missing name is forwarded as the literal "undefined", which is what
    # existing clients of the auxiliary service have always received.
    name = request.args.get("name")
    if name is None:
        name = "undefined"
    return forwarding.forward_to_auxiliary(
        f"/aws/parameters?name={name}",
        status_for_error=parameter_lookup_status,
    )


@parameters_bp.route("/api/parameters/list", methods=["GET"], strict_slashes=False)
def list_parameters():
    return forwarding.forward_to_auxiliary("/aws/parameters/list")
