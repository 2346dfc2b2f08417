from flask import Blueprint

bp = Blueprint("api", __name__, url_prefix="/api")

# Import submodules so their @bp.route decorators register
from . import feedback  # noqa: E402,F401
from . import health  # noqa: E402,F401
from . import files  # noqa: E402,F401
from . import receiver  # noqa: E402,F401
