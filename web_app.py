#!/usr/bin/env python3
"""
Web-based App Concept Interview

Features:
- Describe an app idea in one line
- Answer a few AI-generated multiple-choice questions (toggle answers, ask for more)
- Progress indicator showing how close the concepts are
- Three app concepts with key features at the end
- /api/llm proxy so browsers never see the API key

Run:
    python3 web_app.py

Then open: http://localhost:5001
"""

import logging
import secrets
import threading
from datetime import datetime

from flask import Flask, render_template_string, request, jsonify

from concept_interview.agents.concept_agent import create_concept_agent
from concept_interview.config import Settings, configure_logging
from concept_interview.llm.base import LLMProviderError, Message
from concept_interview.llm.groq_provider import GroqProvider
from concept_interview.llm.manager import create_llm_manager
from concept_interview.llm.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

settings = Settings.from_env()

app = Flask(__name__)
app.secret_key = secrets.token_hex(16)

# Interview agents per session
sessions = {}
sessions_lock = threading.Lock()
SESSION_TTL_SECONDS = 3600  # Prune sessions idle for an hour

# Created on first use so the app imports without credentials
llm_manager = None
upstream_provider = None

VALID_ROLES = ("system", "user", "assistant")

HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>App Concept Interviewer</title>
    <style>
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #f3f4f6;
            min-height: 100vh;
            display: flex;
            justify-content: center;
            padding: 40px 16px;
        }
        .container { width: 100%; max-width: 800px; }
        .prompt-row { display: flex; gap: 12px; margin-top: 30vh; }
        .prompt-input {
            flex: 1;
            height: 56px;
            padding: 0 18px;
            border: 1px solid #d1d5db;
            border-radius: 12px;
            font-size: 18px;
        }
        .round-btn {
            width: 56px;
            height: 56px;
            border-radius: 50%;
            border: none;
            background: #000;
            color: #fff;
            font-size: 22px;
            cursor: pointer;
        }
        .round-btn:disabled { opacity: 0.5; cursor: not-allowed; }
        .message { font-size: 17px; line-height: 26px; margin-bottom: 18px; transition: opacity 0.3s; }
        .message.user { color: #374151; }
        .message.assistant { font-weight: 600; color: #111827; }
        .choices { display: flex; flex-wrap: wrap; gap: 12px; margin: 12px 0 24px; }
        .choice {
            height: 52px;
            padding: 0 20px;
            border-radius: 999px;
            border: 1px solid #d1d5db;
            background: #fff;
            font-size: 17px;
            cursor: pointer;
        }
        .choice.selected { background: #000; color: #fff; border-color: #000; }
        .choice.more { background: #e5e7eb; color: #374151; }
        .footer { display: flex; justify-content: flex-end; align-items: center; gap: 16px; }
        .progress { color: #6b7280; font-size: 17px; }
        .notice {
            background: #fef3c7;
            color: #92400e;
            padding: 12px 16px;
            border-radius: 8px;
            margin-bottom: 16px;
        }
        .concept { background: #fff; border-radius: 12px; padding: 20px; margin-bottom: 16px; }
        .concept h2 { font-size: 20px; margin-bottom: 8px; }
        .concept ul { margin: 12px 0 0 20px; }
        .spinner {
            width: 48px;
            height: 48px;
            border: 4px solid #3b82f6;
            border-top-color: transparent;
            border-radius: 50%;
            animation: spin 1s linear infinite;
            margin: 30vh auto 16px;
        }
        @keyframes spin { to { transform: rotate(360deg); } }
        .hidden { display: none !important; }
    </style>
</head>
<body>
<div class="container">
    <div id="notice" class="notice hidden"></div>

    <div id="initial-view" class="prompt-row">
        <input id="prompt" class="prompt-input" placeholder="What kind of app would you like to create?"
               onkeypress="if(event.key==='Enter')submitPrompt()">
        <button id="prompt-btn" class="round-btn" onclick="submitPrompt()">➜</button>
    </div>

    <div id="chat-view" class="hidden">
        <div id="messages"></div>
        <div id="choices" class="choices"></div>
        <div class="footer">
            <span class="progress" id="progress">0% ready</span>
            <button id="next-btn" class="round-btn" onclick="nextStep()">➜</button>
        </div>
    </div>

    <div id="building-view" class="hidden" style="text-align: center;">
        <div class="spinner"></div>
        <p style="font-size: 20px; font-weight: 600;">Your app is being built</p>
    </div>

    <div id="completed-view" class="hidden">
        <h1 style="margin-bottom: 20px;">Your app concepts</h1>
        <div id="concepts"></div>
        <button class="round-btn" style="width: auto; padding: 0 24px; border-radius: 12px;" onclick="resetInterview()">Start over</button>
    </div>
</div>

<script>
    let sessionId = null;
    let state = null;
    let busy = false;
    let typedIds = new Set();
    let typing = false;

    async function api(path, body) {
        const response = await fetch(path, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify(Object.assign({ session_id: sessionId }, body || {}))
        });
        const data = await response.json();
        if (!response.ok) throw new Error(data.error || 'Request failed');
        return data;
    }

    async function start() {
        const data = await api('/api/start');
        sessionId = data.session_id;
        render(data.state);
    }

    function setBusy(value) {
        busy = value;
        document.getElementById('prompt-btn').disabled = value;
        document.getElementById('next-btn').disabled = value || typing;
        const more = document.getElementById('more-btn');
        if (more) { more.disabled = value; more.textContent = value ? 'Loading...' : 'More'; }
    }

    async function run(path, body, building) {
        if (busy) return;
        setBusy(true);
        if (building) show('building-view');
        try {
            const data = await api(path, body);
            render(data.state);
        } catch (e) {
            showNotice({ message: e.message });
            if (state) render(state);
        } finally {
            setBusy(false);
        }
    }

    function submitPrompt() {
        run('/api/prompt', { prompt: document.getElementById('prompt').value });
    }

    function toggleChoice(label) {
        run('/api/toggle', { label: label });
    }

    function moreChoices() {
        run('/api/more');
    }

    function nextStep() {
        if (!state || state.selected.length === 0) return;
        const building = state.question_count >= state.max_rounds - 1;
        run('/api/next', {}, building);
    }

    function resetInterview() {
        typedIds = new Set();
        document.getElementById('prompt').value = '';
        run('/api/reset');
    }

    function show(viewId) {
        ['initial-view', 'chat-view', 'building-view', 'completed-view'].forEach(id => {
            document.getElementById(id).classList.toggle('hidden', id !== viewId);
        });
    }

    function showNotice(notice) {
        const el = document.getElementById('notice');
        if (!notice) { el.classList.add('hidden'); return; }
        el.textContent = notice.message;
        el.classList.remove('hidden');
    }

    function typeText(el, text, onDone) {
        let i = 0;
        typing = true;
        const timer = setInterval(() => {
            el.textContent = text.slice(0, ++i);
            if (i >= text.length) {
                clearInterval(timer);
                typing = false;
                onDone();
            }
        }, 30);
    }

    function renderChoices() {
        const container = document.getElementById('choices');
        container.innerHTML = '';
        if (typing) return;
        state.choices.forEach(choice => {
            const btn = document.createElement('button');
            btn.className = 'choice' + (choice.selected ? ' selected' : '');
            btn.textContent = (choice.selected ? '✓ ' : '') + choice.label;
            btn.onclick = () => toggleChoice(choice.label);
            container.appendChild(btn);
        });
        if (state.choices.length > 0) {
            const more = document.createElement('button');
            more.id = 'more-btn';
            more.className = 'choice more';
            more.textContent = 'More';
            more.onclick = moreChoices;
            container.appendChild(more);
        }
        document.getElementById('next-btn').disabled = busy || typing;
    }

    function render(newState) {
        state = newState;
        showNotice(state.notice);

        if (state.stage === 'initial') { show('initial-view'); return; }

        if (state.stage === 'completed') {
            const container = document.getElementById('concepts');
            container.innerHTML = '';
            state.concepts.forEach(concept => {
                const div = document.createElement('div');
                div.className = 'concept';
                const h = document.createElement('h2');
                h.textContent = concept.name;
                const p = document.createElement('p');
                p.textContent = concept.description;
                const ul = document.createElement('ul');
                concept.key_features.forEach(f => {
                    const li = document.createElement('li');
                    li.textContent = f.name + ': ' + f.description;
                    ul.appendChild(li);
                });
                div.append(h, p, ul);
                container.appendChild(div);
            });
            show('completed-view');
            return;
        }

        show('chat-view');
        const list = document.getElementById('messages');
        list.innerHTML = '';
        let pending = null;
        state.messages.forEach(msg => {
            const p = document.createElement('p');
            p.className = 'message ' + msg.author;
            p.style.opacity = msg.opacity;
            list.appendChild(p);
            if (msg.author === 'assistant' && !typedIds.has(msg.id)) {
                typedIds.add(msg.id);
                pending = { el: p, text: msg.text };
            } else {
                p.textContent = msg.text;
            }
        });
        document.getElementById('progress').textContent = state.progress + '% ready';
        if (pending) {
            typeText(pending.el, pending.text, renderChoices);
        }
        renderChoices();
        window.scrollTo(0, document.body.scrollHeight);
    }

    start();
</script>
</body>
</html>
"""


def get_llm_manager():
    """LLM manager shared by every interview session."""
    global llm_manager
    if llm_manager is None:
        llm_manager = create_llm_manager(settings)
    return llm_manager


def get_upstream_provider():
    """Provider the /api/llm route forwards to; None when no key is set."""
    global upstream_provider
    if upstream_provider is None:
        if settings.openai_api_key:
            upstream_provider = OpenAIProvider(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
            )
        elif settings.groq_api_key:
            upstream_provider = GroqProvider(api_key=settings.groq_api_key)
    return upstream_provider


def create_agent():
    return create_concept_agent(settings, llm=get_llm_manager())


def _state_payload(agent):
    payload = agent.state.to_dict()
    payload["max_rounds"] = agent.config.max_rounds
    return payload


def _get_session(data):
    session_id = data.get('session_id') if isinstance(data, dict) else None
    with sessions_lock:
        entry = sessions.get(session_id)
        if entry is not None:
            entry['last_seen'] = datetime.now()
        return entry


def _prune_old_sessions():
    """Remove sessions idle for longer than SESSION_TTL_SECONDS. Caller holds sessions_lock."""
    now = datetime.now()
    to_remove = []
    for sid, entry in sessions.items():
        if entry['lock'].locked():
            continue
        if (now - entry['last_seen']).total_seconds() > SESSION_TTL_SECONDS:
            to_remove.append(sid)
    for sid in to_remove:
        del sessions[sid]
    if to_remove:
        logger.info("pruned %d idle sessions", len(to_remove))


def _run_action(action):
    """Run one agent action for the session named in the request body."""
    data = request.get_json(silent=True) or {}
    entry = _get_session(data)
    if entry is None:
        return jsonify({'error': 'Invalid session'}), 400

    if not entry['lock'].acquire(blocking=False):
        return jsonify({'error': 'A request is already in progress'}), 409
    try:
        agent = entry['agent']
        result = action(agent, data)
        return jsonify({'ok': bool(result), 'result': result, 'state': _state_payload(agent)})
    finally:
        entry['lock'].release()


@app.route('/')
def index():
    return render_template_string(HTML_TEMPLATE)


@app.route('/api/start', methods=['POST'])
def start_interview():
    try:
        agent = create_agent()
    except ValueError as e:
        return jsonify({'error': str(e)}), 500

    session_id = secrets.token_hex(8)
    with sessions_lock:
        _prune_old_sessions()
        sessions[session_id] = {
            'agent': agent,
            'lock': threading.Lock(),
            'last_seen': datetime.now(),
        }

    return jsonify({'session_id': session_id, 'state': _state_payload(agent)})


@app.route('/api/state', methods=['GET'])
def get_state():
    entry = _get_session({'session_id': request.args.get('session_id')})
    if entry is None:
        return jsonify({'error': 'Invalid session'}), 400
    return jsonify({'state': _state_payload(entry['agent'])})


@app.route('/api/prompt', methods=['POST'])
def submit_prompt():
    data = request.get_json(silent=True)
    if isinstance(data, dict) and not isinstance(data.get('prompt', ''), str):
        return jsonify({'error': "'prompt' must be a string"}), 400
    return _run_action(lambda agent, data: agent.submit_prompt(data.get('prompt', '')))


@app.route('/api/toggle', methods=['POST'])
def toggle_choice():
    return _run_action(lambda agent, data: agent.toggle_choice(data.get('label', '')))


@app.route('/api/next', methods=['POST'])
def next_step():
    return _run_action(lambda agent, data: agent.submit_selections())


@app.route('/api/more', methods=['POST'])
def more_choices():
    return _run_action(lambda agent, data: agent.request_more_options())


@app.route('/api/reset', methods=['POST'])
def reset_interview():
    def reset(agent, data):
        agent.reset()
        return True
    return _run_action(reset)


@app.route('/api/status', methods=['GET'])
def llm_status():
    try:
        manager = get_llm_manager()
    except ValueError as e:
        return jsonify({'error': str(e)}), 500
    return jsonify(manager.get_status())


@app.route('/api/llm', methods=['POST'])
def llm_proxy():
    """Forward a chat completion request upstream and return its first choice."""
    provider = get_upstream_provider()
    if provider is None or not provider.is_available():
        return jsonify({'error': 'LLM API key not configured'}), 500

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({'error': 'Request body must be JSON'}), 400

    model = body.get('model')
    raw_messages = body.get('messages')
    max_tokens = body.get('max_tokens')

    if not isinstance(model, str) or not model:
        return jsonify({'error': "'model' is required"}), 400
    if not isinstance(raw_messages, list) or not raw_messages:
        return jsonify({'error': "'messages' must be a non-empty list"}), 400
    if max_tokens is not None and (not isinstance(max_tokens, int) or max_tokens <= 0):
        return jsonify({'error': "'max_tokens' must be a positive integer"}), 400

    messages = []
    for item in raw_messages:
        if (
            not isinstance(item, dict)
            or item.get('role') not in VALID_ROLES
            or not isinstance(item.get('content'), str)
        ):
            return jsonify({'error': 'Each message needs a role and string content'}), 400
        messages.append(Message(role=item['role'], content=item['content']))

    try:
        response = provider.chat(messages, max_tokens=max_tokens, model=model)
    except LLMProviderError as e:
        logger.error("LLM proxy upstream error: %s", e)
        return jsonify({'error': str(e) or 'An error occurred'}), e.status_code

    return jsonify(response.to_choice())


if __name__ == '__main__':
    configure_logging(settings.log_level)
    print(f"""
╔═══════════════════════════════════════════════════════════════╗
║     APP CONCEPT INTERVIEWER                                   ║
╠═══════════════════════════════════════════════════════════════╣
║  1. Describe the app you want                                 ║
║  2. Answer {settings.max_rounds - 1} quick multiple-choice questions                   ║
║  3. Get 3 app concepts with key features                      ║
╚═══════════════════════════════════════════════════════════════╝

Open your browser to: http://localhost:{settings.port}

Press Ctrl+C to stop the server.
    """)

    app.run(debug=True, host='0.0.0.0', port=settings.port)
