# controllers/stats_controller.py
from flask import Blueprint, g

from controllers.auth_helpers import auth_required, admin_required
from middlewares.tenant import tenant_required
from services.stats_service import StatsService
from utils.response import json_response


stats_bp = Blueprint("stats", __name__, url_prefix="/api/stats")


@stats_bp.get("/dashboard")
@tenant_required
@auth_required()
@admin_required()
def dashboard():
    return json_response(data=StatsService.dashboard(g.tenant.id, admin_user=g.current_user))
