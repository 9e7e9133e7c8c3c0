from flask import Blueprint, jsonify
from services import current_lab
from forms import OracleForm
from utils.presenters import present

assistant_bp = Blueprint('assistant', __name__)


@assistant_bp.route('/chat', methods=['POST'])
def chat():
    """Ask the oracle about the dream that is currently open."""
    lab = current_lab()
    form = OracleForm()

    if not form.validate_on_submit():
        return jsonify({"errors": form.errors}), 400

    if not lab.view.send_chat(form.message.data):
        return jsonify({"error": "Open a dream before asking the oracle"}), 409

    return jsonify(present(lab.view))
