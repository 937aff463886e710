"""Store blueprint: gold ledger, inventory and catalog trading."""
from flask import Blueprint

bp = Blueprint("store", __name__)

from . import routes  # noqa: E402,F401
