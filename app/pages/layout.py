# app/pages/layout.py
"""
Shared page shell: head/styles, navigation bar, notification toast and the
prediction result card.
"""
from __future__ import annotations

from html import escape
from typing import Optional

from app.prediction_flow import Notification, PredictionOutcome

NAV_LINKS = [
    ("/", "Home"),
    ("/predict/manual", "Manual"),
    ("/predict/image", "Image"),
    ("/predict/voice", "Voice"),
    ("/history", "History"),
]

_STYLES = """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: system-ui, -apple-system, 'Segoe UI', Roboto, sans-serif;
            background: linear-gradient(180deg, #f5f8ff 0%, #ffffff 60%);
            color: #1f2937;
            min-height: 100vh;
        }
        nav {
            position: fixed; top: 0; left: 0; right: 0; z-index: 50;
            background: rgba(255, 255, 255, 0.85);
            border-bottom: 1px solid #e5e7eb;
            backdrop-filter: blur(8px);
        }
        .nav-inner {
            max-width: 1100px; margin: 0 auto; padding: 0.9rem 1rem;
            display: flex; align-items: center; justify-content: space-between;
        }
        .brand { font-weight: 700; font-size: 1.25rem; color: #2563eb; text-decoration: none; }
        .nav-links { display: flex; gap: 1rem; align-items: center; }
        .nav-links a { color: #374151; text-decoration: none; }
        .nav-links a.active { color: #2563eb; font-weight: 600; }
        .nav-links form { display: inline; }
        main { max-width: 1000px; margin: 0 auto; padding: 7rem 1rem 4rem; }
        h1 { font-size: 2.25rem; text-align: center; margin-bottom: 2rem; }
        .grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(300px, 1fr)); gap: 2rem; }
        .card {
            background: #fff; border: 1px solid #e5e7eb; border-radius: 12px;
            padding: 1.5rem; box-shadow: 0 4px 16px rgba(0, 0, 0, 0.05);
        }
        .card h2 { font-size: 1.25rem; margin-bottom: 0.25rem; }
        .card .muted, .muted { color: #6b7280; font-size: 0.9rem; }
        label { display: block; font-weight: 500; margin: 0.9rem 0 0.35rem; }
        input[type=number], input[type=text], input[type=email], input[type=password], textarea {
            width: 100%; padding: 0.6rem 0.75rem; border: 1px solid #d1d5db; border-radius: 8px;
            font-size: 1rem;
        }
        textarea { min-height: 140px; resize: vertical; }
        .amenities { display: grid; grid-template-columns: 1fr 1fr; gap: 0.4rem; }
        .amenities label { font-weight: 400; margin: 0; }
        button, .button {
            display: inline-block; margin-top: 1.25rem; padding: 0.7rem 1.2rem;
            background: #2563eb; color: #fff; border: 0; border-radius: 8px;
            font-size: 1rem; cursor: pointer; text-decoration: none;
        }
        button:disabled { opacity: 0.6; cursor: progress; }
        button.secondary { background: #e5e7eb; color: #111827; }
        button.link { background: none; color: #374151; padding: 0; margin: 0; }
        .price { font-size: 2.25rem; font-weight: 700; color: #2563eb; margin: 0.75rem 0; }
        .range { font-weight: 500; }
        .explanation { margin-top: 1rem; line-height: 1.5; white-space: pre-line; }
        .preview { max-width: 100%; border-radius: 8px; margin-top: 1rem; }
        .toast {
            position: fixed; right: 1.25rem; bottom: 1.25rem; z-index: 60; max-width: 360px;
            background: #fff; border: 1px solid #e5e7eb; border-radius: 10px; padding: 1rem 2.5rem 1rem 1rem;
            box-shadow: 0 8px 24px rgba(0, 0, 0, 0.12);
        }
        .toast.destructive { background: #fef2f2; border-color: #fca5a5; color: #991b1b; }
        .toast strong { display: block; margin-bottom: 0.25rem; }
        .toast .dismiss {
            position: absolute; top: 0.5rem; right: 0.6rem; margin: 0; padding: 0.1rem 0.4rem;
            background: none; color: inherit; font-size: 1.1rem;
        }
        .notice { background: #fffbeb; border: 1px solid #fcd34d; padding: 0.75rem; border-radius: 8px; margin-top: 1rem; }
        .history-item { display: flex; justify-content: space-between; align-items: flex-start; margin-bottom: 1rem; }
        .badge { display: inline-block; font-size: 0.75rem; padding: 0.1rem 0.5rem; border-radius: 999px; background: #dbeafe; color: #1e40af; }
"""

# Submit buttons are disabled while a request is pending; the session is
# re-checked periodically so a sign-out in another tab sends this tab to /auth.
# showToast() builds the same markup as render_notification for errors and
# confirmations raised by page scripts.
_SCRIPTS = """
    <script>
    function wireDismiss(toast) {
        var button = toast.querySelector('.dismiss');
        if (button) {
            button.addEventListener('click', function () { toast.remove(); });
        }
        setTimeout(function () { toast.remove(); }, 5000);
    }
    function showToast(title, description, destructive) {
        var old = document.getElementById('notification');
        if (old) { old.remove(); }
        var toast = document.createElement('div');
        toast.className = destructive ? 'toast destructive' : 'toast';
        toast.id = 'notification';
        toast.setAttribute('role', 'status');
        var strong = document.createElement('strong');
        strong.textContent = title;
        var span = document.createElement('span');
        span.textContent = description;
        var button = document.createElement('button');
        button.type = 'button';
        button.className = 'dismiss';
        button.setAttribute('aria-label', 'Dismiss');
        button.innerHTML = '&times;';
        toast.appendChild(strong);
        toast.appendChild(span);
        toast.appendChild(button);
        document.body.appendChild(toast);
        wireDismiss(toast);
    }
    (function () {
        document.querySelectorAll('form[data-pending-label]').forEach(function (form) {
            form.addEventListener('submit', function () {
                var button = form.querySelector('button[type=submit]');
                if (button) {
                    button.disabled = true;
                    button.textContent = form.getAttribute('data-pending-label');
                }
            });
        });
        document.querySelectorAll('.toast').forEach(wireDismiss);
        if (document.body.getAttribute('data-requires-session') === 'true') {
            setInterval(function () {
                fetch('/api/auth/session', {credentials: 'same-origin'})
                    .then(function (r) { return r.json(); })
                    .then(function (data) { if (!data.session) { window.location = '/auth'; } })
                    .catch(function () {});
            }, 60000);
        }
    })();
    </script>
"""


def render_navigation(user=None, active_path: str = "/") -> str:
    """Top navigation; shows sign-out for signed-in users, sign-in otherwise."""
    links = []
    if user is not None:
        for href, label in NAV_LINKS:
            css = ' class="active"' if href == active_path else ""
            links.append(f'<a href="{href}"{css}>{label}</a>')
        links.append(
            '<form method="post" action="/signout">'
            '<button type="submit" class="link">Sign Out</button></form>'
        )
    else:
        links.append('<a href="/auth">Sign In</a>')

    return f"""<nav>
        <div class="nav-inner">
            <a class="brand" href="/">ValueMatrix</a>
            <div class="nav-links">{''.join(links)}</div>
        </div>
    </nav>"""


def render_notification(notification: Optional[Notification]) -> str:
    """Dismissible toast, or nothing."""
    if notification is None:
        return ""
    css = "toast destructive" if notification.variant == "destructive" else "toast"
    return f"""<div class="{css}" role="status" id="notification">
        <strong>{escape(notification.title)}</strong>
        <span>{escape(notification.description)}</span>
        <button type="button" class="dismiss" aria-label="Dismiss">&times;</button>
    </div>"""


def render_result_card(outcome: Optional[PredictionOutcome], extra: str = "") -> str:
    """
    Result card for the predictive pages.

    Shown only for a SUCCESS outcome; otherwise a placeholder.
    """
    if outcome is None or outcome.result is None:
        return """<div class="card" id="result">
            <h2>Prediction</h2>
            <p class="muted">Your estimate will appear here.</p>
        </div>"""

    price_range = outcome.formatted_range
    range_html = (
        f'<p class="range">Range: {escape(price_range)}</p>' if price_range else ""
    )
    explanation = outcome.explanation
    explanation_html = (
        f'<p class="explanation">{escape(explanation)}</p>' if explanation else ""
    )

    return f"""<div class="card" id="result">
            <h2>Predicted Price</h2>
            <p class="price" id="predicted-price">{escape(outcome.formatted_price)}</p>
            {range_html}
            {explanation_html}
            {extra}
        </div>"""


def render_page(
    title: str,
    body: str,
    user=None,
    active_path: str = "/",
    notification: Optional[Notification] = None,
    requires_session: bool = False,
    extra_scripts: str = "",
) -> str:
    """Full HTML document with navigation, body and notification."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)} - ValueMatrix</title>
    <style>{_STYLES}</style>
</head>
<body data-requires-session="{'true' if requires_session else 'false'}">
    {render_navigation(user, active_path)}
    <main>
        {body}
    </main>
    {render_notification(notification)}
    {_SCRIPTS}
    {extra_scripts}
</body>
</html>"""
