from flask import Blueprint, jsonify

from sentquote.schemas import event_schema
from sentquote.services import get_stats
from sentquote.utils.auth import jwt_required_custom, current_identity

stats_bp = Blueprint('stats', __name__)


@stats_bp.route('', methods=['GET'])
@jwt_required_custom
def dashboard_stats():
    """Quote counts, views, revenue and the latest activity for the dashboard."""
    user_id = current_identity()['id']
    aggregator = get_stats()

    recent_events = []
    for event, title, client_name in aggregator.recent_events(user_id):
        entry = event_schema.dump(event)
        entry['title'] = title
        entry['client_name'] = client_name
        recent_events.append(entry)

    return jsonify({
        'stats': aggregator.summary(user_id),
        'recentEvents': recent_events
    }), 200
