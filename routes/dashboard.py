from flask import Blueprint, jsonify, current_app, request, redirect, url_for
from services import current_lab
from utils.presenters import present

# Create blueprint
dashboard_bp = Blueprint('dashboard', __name__)

@dashboard_bp.route('/')
def index():
    lab = current_lab()

    # Returning from checkout: unlock once, then drop the flag from the address
    if request.args.get('payment_success') == 'true':
        current_app.logger.info("Payment successful! Unlocking Premium...")
        lab.view.complete_payment()
        return redirect(url_for('dashboard.index'))

    lab.view.show_dashboard()
    return jsonify(present(lab.view))

@dashboard_bp.route('/favorites')
def favorites():
    lab = current_lab()
    lab.view.show_favorites()
    return jsonify(present(lab.view))

@dashboard_bp.route('/insights')
def insights():
    """Sentiment flow, dominant moods and lucidity across the whole journal."""
    lab = current_lab()
    lab.view.show_stats()
    return jsonify(present(lab.view))
