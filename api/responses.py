from flask import jsonify


def api_response(status: int, data=None, message: str = "Success"):
    """Uniform success envelope: {success, statusCode, data, message}."""
    payload = {
        "success": status < 400,
        "statusCode": status,
        "data": data if data is not None else {},
        "message": message,
    }
    return jsonify(payload), status
