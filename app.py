"""Flask web application for the EduGuide college advisor."""

import logging
import os

from flask import Flask, request, jsonify

from config import LOG_LEVEL, MAX_HISTORY_TURNS
from eduguide.data import CollegeCatalog
from eduguide.models import ChatRequest, ChatTurn, UserProfile
from eduguide.services import ChatService

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.json.sort_keys = False

MAX_MESSAGE_CHARS = 4000
MAX_USER_NAME_CHARS = 80

# Shared across requests; swap in tests
chat_service = ChatService()


def sanitize_history(raw_history):
    """Keep well-formed turns only, truncated, most recent last."""
    if not isinstance(raw_history, list):
        return []

    turns = []
    for item in raw_history:
        if not isinstance(item, dict):
            continue
        role = item.get('role')
        content = item.get('content')
        if role not in ('user', 'assistant') or not isinstance(content, str):
            continue
        content = content.strip()
        if not content:
            continue
        turns.append(ChatTurn(role=role, content=content[:MAX_MESSAGE_CHARS]))

    return turns[-MAX_HISTORY_TURNS:]


def _parse_number(value, cast):
    if value in (None, ''):
        return None
    return cast(value)


@app.route('/health')
def health():
    """Liveness probe."""
    return jsonify({'status': 'ok'})


@app.route('/api/ai-chat', methods=['POST'])
def api_ai_chat():
    """Answer one advisor chat turn."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    message = data.get('message')
    if not isinstance(message, str) or not message.strip():
        return jsonify({'error': 'Message is required'}), 400
    message = message.strip()[:MAX_MESSAGE_CHARS]

    raw_profile = data.get('currentProfile')
    try:
        profile = UserProfile.from_dict(raw_profile if isinstance(raw_profile, dict) else None)
    except (TypeError, ValueError):
        return jsonify({'error': 'currentProfile is malformed'}), 400

    user_name = data.get('userName')
    if isinstance(user_name, str):
        user_name = user_name.strip()[:MAX_USER_NAME_CHARS] or None
    else:
        user_name = None

    chat_request = ChatRequest(
        message=message,
        current_profile=profile,
        history=sanitize_history(data.get('history')),
        mode='dashboard' if data.get('mode') == 'dashboard' else 'demo',
        user_name=user_name,
    )

    try:
        response = chat_service.generate(chat_request)
    except Exception:
        logger.exception("[api] ai-chat failed")
        return jsonify({'error': 'Failed to generate AI response'}), 500

    return jsonify(response.to_dict())


@app.route('/api/colleges')
def api_colleges():
    """Search the college catalog."""
    args = request.args
    try:
        max_tuition = _parse_number(args.get('maxTuition'), int)
        min_gpa = _parse_number(args.get('minGpa'), float)
    except ValueError:
        return jsonify({'error': 'maxTuition and minGpa must be numbers'}), 400

    colleges = CollegeCatalog.default().search(
        state=args.get('state') or None,
        type=args.get('type') or None,
        max_tuition=max_tuition,
        min_gpa=min_gpa,
        major=args.get('major') or None,
        query=args.get('q') or None,
    )
    return jsonify({
        'count': len(colleges),
        'colleges': [college.to_dict() for college in colleges],
    })


@app.route('/api/colleges/filters')
def api_college_filters():
    """Distinct values for the catalog filter dropdowns."""
    catalog = CollegeCatalog.default()
    return jsonify({'states': catalog.states(), 'types': catalog.types()})


@app.route('/api/colleges/<college_id>')
def api_college_detail(college_id):
    """Return one college by id."""
    college = CollegeCatalog.default().get(college_id)
    if college is None:
        return jsonify({'error': 'College not found'}), 404
    return jsonify(college.to_dict())


if __name__ == '__main__':
    if not os.environ.get('OPENAI_API_KEY') and not os.environ.get('GEMINI_API_KEY') and not os.environ.get('GOOGLE_API_KEY'):
        logger.warning("No LLM API key set; chat replies will use the template fallback")

    port = int(os.environ.get('PORT', 5000))
    app.run(debug=False, host='0.0.0.0', port=port)
