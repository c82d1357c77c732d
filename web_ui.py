#!/usr/bin/env python3
"""
Web UI for the Staff Feedback Form.
Flask application serving the evaluation form and the JSON API behind it.
"""

import logging
import threading
import time
import uuid
from collections import OrderedDict

from flask import Flask, jsonify, redirect, render_template_string, request, session

from staff_feedback.config.config_manager import ConfigManager, ConfigurationError
from staff_feedback.config.settings import CRITERIA, RATING_MAX, RATING_MIN
from staff_feedback.models.identity import SessionIdentity
from staff_feedback.services.form_session import FormSession
from staff_feedback.services.form_state import FormBusyError
from staff_feedback.services.mirror_sink import BackgroundMirror, create_mirror_sink
from staff_feedback.services.notifier import CollectingNotifier
from staff_feedback.services.staff_resolver import StaffResolver
from staff_feedback.services.store_client import SupabaseStoreClient
from staff_feedback.services.submission import SubmissionPipeline
from staff_feedback.services.unit_catalog import UnitCatalogLoader
from staff_feedback.utils.logging_config import ErrorHandler, setup_logging

logger = logging.getLogger(__name__)

SUBMIT_STATUS_CODES = {
    'submitted': 200,
    'invalid': 422,
    'unauthenticated': 401,
    'failed': 502,
    'busy': 409,
}

HTML_TEMPLATE = '''
<!DOCTYPE html>
<html>
<head>
    <title>Staff Feedback</title>
    <style>
        body { font-family: Arial, sans-serif; max-width: 860px; margin: 30px auto; padding: 20px; }
        .card { background: #f9f9f9; padding: 20px; border-radius: 8px; margin-bottom: 20px; }
        .snapshot { display: grid; grid-template-columns: 1fr 1fr; gap: 6px 20px; font-size: 14px; }
        .criterion { margin: 12px 0; }
        .note { padding: 10px; border-radius: 5px; margin: 6px 0; }
        .success { background: #d4edda; color: #155724; }
        .error { background: #f8d7da; color: #721c24; }
        .warning, .info { background: #fff3cd; color: #856404; }
        .btn { background: #007bff; color: white; padding: 10px 20px; border: none; border-radius: 5px; cursor: pointer; }
        .btn:disabled { background: #ccc; cursor: not-allowed; }
    </style>
</head>
<body>
    <h1>Staff Feedback</h1>
    <div id="notes"></div>
    <div class="card">
        <h3>Step 1 - Unit and staff member</h3>
        <label>Unit *</label>
        <select id="unit"><option value="">Choose a unit</option></select>
        <label>Staff member *</label>
        <select id="staff" disabled><option value="">Choose a staff member</option></select>
        <div id="snapshot" class="snapshot"></div>
    </div>
    <div class="card">
        <h3>Step 2 - Evaluation</h3>
        {% for criterion in criteria %}
        <div class="criterion">
            <strong>{{ criterion.title }}</strong><br>
            {% for rating in ratings %}
            <label><input type="radio" name="{{ criterion.key }}" value="{{ rating }}"> {{ rating }}</label>
            {% endfor %}
        </div>
        {% endfor %}
        <label>Final remarks</label><br>
        <textarea id="remarks" rows="5" cols="80"></textarea>
    </div>
    <button id="submit" class="btn">Submit feedback</button>
    <script>
        async function call(url, body) {
            const response = await fetch(url, body === undefined ? {} : {
                method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body)
            });
            const data = await response.json();
            const notes = document.getElementById('notes');
            (data.notifications || []).forEach(n => {
                const div = document.createElement('div');
                div.className = 'note ' + n.severity;
                div.textContent = n.title + (n.description ? ': ' + n.description : '');
                notes.prepend(div);
            });
            if (data.form) render(data.form);
            return data;
        }
        function render(form) {
            const staff = document.getElementById('staff');
            staff.replaceChildren(new Option('Choose a staff member', ''));
            form.roster.forEach(s => staff.add(new Option(s.label, s.registration_id)));
            staff.disabled = !form.unit;
            staff.value = form.staff ? form.staff.registration_id : '';
            document.getElementById('unit').value = form.unit;
            const snapshot = document.getElementById('snapshot');
            snapshot.replaceChildren();
            Object.entries(form.staff || {}).forEach(([k, v]) => {
                const row = document.createElement('div');
                const name = document.createElement('b');
                name.textContent = k;
                row.append(name, ': ' + v);
                snapshot.append(row);
            });
            Object.entries(form.answers).forEach(([key, value]) => {
                document.querySelectorAll(`input[name="${key}"]`).forEach(
                    input => { input.checked = String(value) === input.value; });
            });
            document.getElementById('remarks').value = form.remarks;
            document.getElementById('submit').disabled = form.submitting;
        }
        document.getElementById('unit').onchange = e => call('/api/unit', {unit: e.target.value});
        document.getElementById('staff').onchange = e => call('/api/staff', {registration_id: e.target.value});
        document.querySelectorAll('input[type=radio]').forEach(input => {
            input.onchange = () => call('/api/answer', {criterion: input.name, rating: Number(input.value)});
        });
        document.getElementById('remarks').onchange = e => call('/api/remarks', {remarks: e.target.value});
        document.getElementById('submit').onclick = async () => {
            const button = document.getElementById('submit');
            button.disabled = true;
            await call('/api/submit', {});
            button.disabled = false;
        };
        call('/api/units').then(data => {
            const unit = document.getElementById('unit');
            (data.units || []).forEach(u => unit.add(new Option(u, u)));
        });
    </script>
</body>
</html>
'''


class FormSessionRegistry:
    """
    Keeps one FormSession per browser session.

    Forms idle for longer than idle_timeout seconds are discarded, and when
    more than max_sessions are open the least recently used one goes first.
    """

    def __init__(self, factory, max_sessions: int = 500, idle_timeout: float = 3600, clock=time.monotonic):
        self.factory = factory
        self.max_sessions = max(1, max_sessions)
        self.idle_timeout = idle_timeout
        self.clock = clock
        self._sessions = OrderedDict()
        self._lock = threading.Lock()

    def get(self, form_id: str) -> FormSession:
        with self._lock:
            now = self.clock()
            self._evict_idle(now)
            if form_id in self._sessions:
                form, _ = self._sessions.pop(form_id)
            else:
                form = self.factory()
            self._sessions[form_id] = (form, now)
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info(f"Discarded form {evicted}: too many open forms")
            return form

    def discard(self, form_id: str) -> None:
        with self._lock:
            self._sessions.pop(form_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_idle(self, now: float) -> None:
        # entries are kept in last-access order, oldest first
        while self._sessions:
            form_id, (_, last_access) = next(iter(self._sessions.items()))
            if now - last_access < self.idle_timeout:
                break
            del self._sessions[form_id]
            logger.info(f"Discarded form {form_id} after {self.idle_timeout:.0f}s idle")


def create_app(config_manager=None, store=None, mirror=None, error_handler=None) -> Flask:
    """
    Build the Flask application.

    Args:
        config_manager: Configuration; loaded from the environment when omitted
        store: Primary store client; a SupabaseStoreClient when omitted
        mirror: Spreadsheet sink; chosen from MIRROR_BACKEND when omitted
        error_handler: Shared error tracker

    Returns:
        Flask: Configured application
    """
    config_manager = config_manager or ConfigManager()
    store = store if store is not None else SupabaseStoreClient(config_manager)
    mirror = mirror if mirror is not None else create_mirror_sink(config_manager)
    error_handler = error_handler or ErrorHandler(logger)
    background_mirror = BackgroundMirror(mirror, error_handler) if mirror is not None else None

    app = Flask(__name__)
    app.secret_key = config_manager.get_secret_key()

    staff_table = config_manager.get_staff_table()
    require_auth = config_manager.is_auth_required()
    anonymous_id, anonymous_name = config_manager.get_anonymous_identity()

    def build_form_session() -> FormSession:
        notifier = CollectingNotifier()
        return FormSession(
            catalog=UnitCatalogLoader(store, staff_table, notifier, error_handler),
            resolver=StaffResolver(store, staff_table, notifier, error_handler),
            pipeline=SubmissionPipeline(
                store,
                config_manager.get_feedback_table(),
                notifier,
                mirror=background_mirror,
                require_auth=require_auth,
                error_handler=error_handler,
            ),
            notifier=notifier,
        )

    registry = FormSessionRegistry(
        build_form_session,
        max_sessions=config_manager.get_form_session_limit(),
        idle_timeout=config_manager.get_form_session_ttl(),
    )
    app.extensions['form_sessions'] = registry
    app.extensions['mirror'] = background_mirror

    def current_identity() -> SessionIdentity:
        identity = session.get('identity')
        if identity:
            return SessionIdentity(identity['user_id'], identity['display_name'], authenticated=True)
        return SessionIdentity.anonymous(anonymous_id, anonymous_name)

    def current_form() -> FormSession:
        if 'form_id' not in session:
            session['form_id'] = uuid.uuid4().hex
        return registry.get(session['form_id'])

    def reply(form: FormSession, status_code: int = 200, **payload):
        payload['form'] = form.state.snapshot()
        payload['notifications'] = [n.to_dict() for n in form.notifier.drain()]
        return jsonify(payload), status_code

    @app.errorhandler(FormBusyError)
    def form_busy(error):
        return reply(current_form(), 409, error=str(error))

    @app.before_request
    def require_identity():
        """Route unauthenticated users out of the form when sign-in is required."""
        if not require_auth or request.endpoint in ('session_event', 'status', 'static'):
            return None
        if current_identity().authenticated:
            return None
        login_url = config_manager.get_login_url()
        if login_url and request.method == 'GET' and not request.path.startswith('/api/'):
            return redirect(login_url)
        return jsonify({'error': 'Authentication required'}), 401

    @app.route('/')
    def index():
        """Evaluation form page."""
        return render_template_string(
            HTML_TEMPLATE,
            criteria=CRITERIA,
            ratings=range(RATING_MIN, RATING_MAX + 1)
        )

    @app.route('/session', methods=['POST'])
    def session_event():
        """Receive 'authenticated' / 'unauthenticated' events from the identity provider."""
        data = request.get_json(silent=True) or {}
        event = data.get('event')
        if event == 'authenticated':
            user_id = str(data.get('user_id') or '').strip()
            if not user_id:
                return jsonify({'error': 'user_id is required'}), 400
            session['identity'] = {
                'user_id': user_id,
                'display_name': str(data.get('display_name') or user_id)
            }
            logger.info(f"Session authenticated for {user_id}")
            return jsonify({'authenticated': True})
        if event == 'unauthenticated':
            session.pop('identity', None)
            form_id = session.pop('form_id', None)
            if form_id:
                registry.discard(form_id)
            return jsonify({'authenticated': False})
        return jsonify({'error': f'Unknown session event: {event}'}), 400

    @app.route('/api/units')
    def units():
        form = current_form()
        return reply(form, units=form.units())

    @app.route('/api/unit', methods=['POST'])
    def change_unit():
        data = request.get_json(silent=True) or {}
        form = current_form()
        form.change_unit(str(data.get('unit') or ''))
        return reply(form)

    @app.route('/api/staff', methods=['POST'])
    def select_staff():
        data = request.get_json(silent=True) or {}
        form = current_form()
        form.select_staff(str(data.get('registration_id') or ''))
        return reply(form)

    @app.route('/api/answer', methods=['POST'])
    def set_answer():
        data = request.get_json(silent=True) or {}
        form = current_form()
        try:
            form.set_answer(data.get('criterion'), data.get('rating'))
        except KeyError:
            return reply(form, 400, error=f"Unknown criterion: {data.get('criterion')}")
        except ValueError as e:
            return reply(form, 400, error=str(e))
        return reply(form)

    @app.route('/api/remarks', methods=['POST'])
    def set_remarks():
        data = request.get_json(silent=True) or {}
        form = current_form()
        form.set_remarks(str(data.get('remarks') or ''))
        return reply(form)

    @app.route('/api/submit', methods=['POST'])
    def submit():
        form = current_form()
        result = form.submit(current_identity())
        return reply(
            form,
            SUBMIT_STATUS_CODES.get(result.status, 500),
            status=result.status,
            field=result.field
        )

    @app.route('/status')
    def status():
        """Check system status."""
        summary = error_handler.get_error_summary()
        return jsonify({
            'status': 'healthy',
            'configuration': config_manager.get_all_config(),
            'errors': {
                'total': summary['total_errors'],
                'by_type': summary['error_counts_by_type'],
            }
        })

    return app


def main():
    """Start the development server."""
    try:
        config_manager = ConfigManager()
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        raise SystemExit(1)

    _, error_handler = setup_logging(log_level=config_manager.get_log_level())
    app = create_app(config_manager, error_handler=error_handler)

    print("Starting Staff Feedback Web UI...")
    print("Open your browser to: http://localhost:5000")
    try:
        app.run(host='0.0.0.0', port=5000)
    finally:
        if app.extensions['mirror'] is not None:
            app.extensions['mirror'].shutdown(wait=True)
        error_handler.log_error_summary()


if __name__ == '__main__':
    main()
