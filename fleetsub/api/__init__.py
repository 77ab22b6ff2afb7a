"""
Flask-RESTX namespaces exposed by the API.
"""
from flask import request


def json_body():
    """The request's JSON object, or an empty dict for anything else."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
