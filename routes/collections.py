from flask import Blueprint, jsonify
from services import current_lab
from services.entitlement import Denied
from forms import CollectionForm
from utils.presenters import present

collections_bp = Blueprint('collections', __name__)

@collections_bp.route('/', methods=['POST'])
def create_collection():
    lab = current_lab()
    form = CollectionForm()

    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    result = lab.view.add_collection(form.name.data)
    if isinstance(result, Denied):
        return jsonify(present(lab.view)), 402

    payload = present(lab.view)
    payload['created'] = result.to_document()
    return jsonify(payload), 201

@collections_bp.route('/<collection_id>')
def view_collection(collection_id):
    lab = current_lab()
    lab.view.select_collection(collection_id)
    return jsonify(present(lab.view))

@collections_bp.route('/<collection_id>/delete', methods=['POST'])
def delete_collection(collection_id):
    lab = current_lab()
    lab.view.delete_collection(collection_id)
    return jsonify(present(lab.view))
