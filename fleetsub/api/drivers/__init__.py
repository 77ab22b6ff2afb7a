"""
Drivers namespace for the fleet roster.
"""
from flask_restx import Namespace

driver_ns = Namespace(
    'drivers',
    description='Driver records, statistics and license calendar'
)

from . import routes  # noqa: E402,F401
