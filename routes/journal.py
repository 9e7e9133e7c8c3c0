import io
from flask import Blueprint, jsonify, current_app, send_file, abort
from services import current_lab
from services.entitlement import Denied
from services.errors import AnalysisError
from forms import DreamEntryForm, DreamEditForm, CollectionAssignForm, split_labels
from utils.images import split_data_url
from utils.presenters import present, dream_card

# Create blueprint
journal_bp = Blueprint('journal', __name__)

INTERPRETATION_FAILED = 'Something went wrong while interpreting your dream. Please try again.'


def _get_dream_or_404(dream_id):
    dream = current_lab().store.get_dream(dream_id)
    if dream is None:
        abort(404, description='Dream not found')
    return dream


def _unknown_collection(section_id):
    return section_id and current_lab().store.get_collection(section_id) is None


def _upgrade_required(lab):
    lab.view.prompt_upgrade()
    return jsonify(present(lab.view)), 402

@journal_bp.route('/new', methods=['GET'])
def new_entry():
    lab = current_lab()
    lab.view.new_entry()
    return jsonify(present(lab.view))

@journal_bp.route('/new/cancel', methods=['POST'])
def cancel_entry():
    lab = current_lab()
    lab.view.cancel_entry()
    return jsonify(present(lab.view))

@journal_bp.route('/new', methods=['POST'])
def create_entry():
    lab = current_lab()
    form = DreamEntryForm()

    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400
    if _unknown_collection(form.section_id.data):
        return jsonify({'errors': {'section_id': ['Unknown collection']}}), 400

    task = lab.view.begin_creation()
    try:
        result = lab.workflow.create(
            form.content.data,
            is_lucid=form.is_lucid.data,
            is_favorite=form.is_favorite.data,
            section_id=form.section_id.data or None,
            custom_labels=split_labels(form.labels.data),
        )
    except AnalysisError as e:
        lab.view.abandon_creation(task)
        current_app.logger.error(f'Error interpreting dream: {str(e)}')
        payload = present(lab.view)
        payload['error'] = INTERPRETATION_FAILED
        return jsonify(payload), 502

    if isinstance(result, Denied):
        lab.view.abandon_creation(task)
        return _upgrade_required(lab)

    task.finish(result)
    payload = present(lab.view)
    payload['created'] = dream_card(result)
    return jsonify(payload), 201

@journal_bp.route('/entry/<dream_id>')
def view_entry(dream_id):
    lab = current_lab()
    if lab.view.open_entry(dream_id) is None:
        abort(404, description='Dream not found')
    return jsonify(present(lab.view))

@journal_bp.route('/back', methods=['POST'])
def back():
    lab = current_lab()
    lab.view.back()
    return jsonify(present(lab.view))

@journal_bp.route('/entry/<dream_id>/edit', methods=['POST'])
def edit_entry(dream_id):
    lab = current_lab()
    dream = _get_dream_or_404(dream_id)
    form = DreamEditForm()

    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400

    content = form.content.data if form.content.data and form.content.data.strip() else None
    # A submitted but empty labels field clears the labels
    labels = split_labels(form.labels.data) if form.labels.raw_data else None

    updated = lab.workflow.edit(dream, content=content, date=form.date.data, custom_labels=labels)
    lab.view.dream_changed(updated)
    return jsonify(present(lab.view))

@journal_bp.route('/entry/<dream_id>/delete', methods=['POST'])
def delete_entry(dream_id):
    lab = current_lab()
    lab.view.delete_dream(dream_id)
    return jsonify(present(lab.view))

@journal_bp.route('/entry/<dream_id>/favorite', methods=['POST'])
def toggle_favorite(dream_id):
    lab = current_lab()
    dream = _get_dream_or_404(dream_id)

    result = lab.workflow.toggle_favorite(dream)
    if isinstance(result, Denied):
        return _upgrade_required(lab)

    lab.view.dream_changed(result)
    return jsonify(present(lab.view))

@journal_bp.route('/entry/<dream_id>/collection', methods=['POST'])
def move_entry(dream_id):
    lab = current_lab()
    dream = _get_dream_or_404(dream_id)
    form = CollectionAssignForm()

    if not form.validate_on_submit():
        return jsonify({'errors': form.errors}), 400
    if _unknown_collection(form.section_id.data):
        return jsonify({'errors': {'section_id': ['Unknown collection']}}), 400

    updated = lab.workflow.set_collection(dream, form.section_id.data or None)
    lab.view.dream_changed(updated)
    return jsonify(present(lab.view))

@journal_bp.route('/entry/<dream_id>/image')
def download_image(dream_id):
    dream = _get_dream_or_404(dream_id)
    if not dream.image_url:
        abort(404, description='This dream has no image')

    try:
        mime_type, payload = split_data_url(dream.image_url)
    except ValueError:
        current_app.logger.warning(f'Unreadable image stored for dream {dream.id}')
        abort(404, description='This dream has no image')

    extension = mime_type.split('/')[-1].replace('jpeg', 'jpg')
    return send_file(
        io.BytesIO(payload),
        mimetype=mime_type,
        as_attachment=True,
        download_name=f'somnium-{dream.id}.{extension}',
    )
