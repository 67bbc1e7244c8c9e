"""
Shared downstream-forwarding pattern used by the route blueprints.
"""
from flask import current_app

from main_api.auxiliary import AuxiliaryServiceError
from main_api.envelope import envelope_response


def auxiliary_client():
    return current_app.extensions["auxiliary"]


def service_version():
    return current_app.config["SERVICE_VERSION"]


def internal_error_status(error):
    return 500


def forward_to_auxiliary(endpoint, status_for_error=internal_error_status):
    """Call `endpoint` on the auxiliary service and wrap the outcome in an envelope.

    The auxiliary version is resolved before the call and, when the call
    fails, resolved again for the error envelope.
    """
    client = auxiliary_client()
    try:
        auxiliary_version = client.get_version()
        data = client.call(endpoint)
    except AuxiliaryServiceError as error:
        return envelope_response(
            False,
            error.message,
            service_version(),
            client.get_version(),
            status_code=status_for_error(error),
        )
    return envelope_response(True, data, service_version(), auxiliary_version)
