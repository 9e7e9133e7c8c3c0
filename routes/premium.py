from urllib.parse import urlencode
from flask import Blueprint, jsonify, current_app, redirect, url_for, abort
from services import current_lab
from forms import RedeemCodeForm
from utils.presenters import present

premium_bp = Blueprint('premium', __name__)

@premium_bp.route('/')
def open_prompt():
    lab = current_lab()
    lab.view.prompt_upgrade()
    return jsonify(present(lab.view))

@premium_bp.route('/close', methods=['POST'])
def close_prompt():
    lab = current_lab()
    lab.view.close_upgrade_prompt()
    return jsonify(present(lab.view))

@premium_bp.route('/redeem', methods=['POST'])
def redeem():
    lab = current_lab()
    form = RedeemCodeForm()

    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    if not lab.view.redeem(form.code.data):
        current_app.logger.info('Rejected promo code')
        payload = present(lab.view)
        payload['error'] = 'Invalid promo code'
        return jsonify(payload), 400

    return jsonify(present(lab.view))

@premium_bp.route('/checkout/<plan>')
def checkout(plan):
    """Send the user to PayPal; PayPal returns them with payment_success=true."""
    plans = current_app.config['PLANS']
    if plan not in plans:
        abort(404, description='Unknown plan')

    item_name, amount = plans[plan]
    query = urlencode({
        'cmd': '_xclick',
        'business': current_app.config['PAYPAL_BUSINESS'],
        'item_name': item_name,
        'amount': amount,
        'currency_code': 'USD',
        'return': url_for('dashboard.index', payment_success='true', _external=True),
    })
    return redirect(f"{current_app.config['PAYPAL_URL']}?{query}")
