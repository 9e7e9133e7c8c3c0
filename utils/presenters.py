from flask import current_app, url_for

from services.insights import InsufficientData, summarize
from services.view_state import Screen

HEADINGS = {
    Screen.DASHBOARD: ('Dream Journal', 'Explore your subconscious mind.'),
    Screen.FAVORITES: ('Favorites', 'Your most treasured night visions.'),
}
TOP_MOODS = 5


def format_datetime(value, format='medium'):
    """Format datetime objects for display."""
    if not value:
        return ""

    if format == 'full':
        format = "%B %d, %Y at %I:%M %p"
    elif format == 'medium':
        format = "%b %d, %Y"
    elif format == 'chart':
        format = "%b %d"

    return value.strftime(format)


def dream_card(dream):
    analysis = dream.analysis
    return {
        'id': dream.id,
        'date': dream.date.isoformat(),
        'display_date': format_datetime(dream.date),
        'title': analysis.title if analysis else 'Untitled Dream',
        'summary': analysis.summary if analysis else dream.content,
        'mood': analysis.mood if analysis else None,
        'color': analysis.color_hex if analysis else None,
        'tags': analysis.tags if analysis else [],
        'is_favorite': dream.is_favorite,
        'is_lucid': dream.is_lucid,
        'custom_labels': dream.custom_labels,
        'section_id': dream.section_id,
        'has_image': bool(dream.image_url),
    }


def dream_detail(dream):
    detail = dream_card(dream)
    detail.update({
        'content': dream.content,
        'display_date': format_datetime(dream.date, 'full'),
        'analysis': dream.analysis.to_document() if dream.analysis else None,
        'image_url': dream.image_url,
        'download_url': url_for('journal.download_image', dream_id=dream.id) if dream.image_url else None,
    })
    return detail


def insights_payload(dreams):
    summary = summarize(dreams)
    if isinstance(summary, InsufficientData):
        return {
            'insufficient_data': True,
            'total': summary.total,
            'message': summary.message,
        }
    return {
        'insufficient_data': False,
        'total': summary.total,
        'lucid_count': summary.lucid_count,
        'lucidity': summary.lucidity,
        'sentiment': [
            {
                'date': format_datetime(point.date, 'chart'),
                'full_date': point.date.isoformat(),
                'score': point.score,
                'mood': point.mood,
            }
            for point in summary.sentiment
        ],
        'moods': [
            {'mood': mood, 'count': count, 'share': round(100 * count / summary.total, 1)}
            for mood, count in summary.moods[:TOP_MOODS]
        ],
    }


def present(view):
    """Describe the controller's current screen as a JSON-ready dict."""
    state = view.state
    payload = {
        'view': {'screen': state.screen.value, 'target': state.target},
        'is_premium': view.gate.is_premium,
        'upgrade_prompt_open': view.upgrade_prompt_open,
        'notice': view.pop_notice(),
        'configuration_error': None if current_app.config.get('GOOGLE_API_KEY')
        else 'API key is missing. Configure GOOGLE_API_KEY to interpret dreams.',
        'collections': [c.to_document() for c in view.collections],
    }

    if state.screen in (Screen.DASHBOARD, Screen.FAVORITES, Screen.COLLECTION):
        if state.screen == Screen.COLLECTION:
            collection = view.current_collection()
            name = collection.name if collection else 'Collection'
            heading, subtitle = name, f'Dreams collected in "{name}".'
        else:
            heading, subtitle = HEADINGS[state.screen]
        payload.update({
            'heading': heading,
            'subtitle': subtitle,
            'dreams': [dream_card(d) for d in view.visible_dreams()],
        })
    elif state.screen == Screen.COMPOSER:
        payload['pending_creation'] = view.pending_creation.id if view.pending_creation else None
    elif state.screen == Screen.DETAIL:
        payload.update({
            'dream': dream_detail(view.selected_dream) if view.selected_dream else None,
            'transcript': [m.to_dict() for m in view.transcript],
        })
    elif state.screen == Screen.STATS:
        payload['insights'] = insights_payload(view.dreams)

    return payload
