# app/pages/history.py
"""Prediction history page."""
from __future__ import annotations

from html import escape
from typing import Optional

from app.formatting import format_inr, format_number_en_in, format_timestamp_en_in
from app.pages.layout import render_page
from app.prediction_flow import Notification
from persistence.predictions import PredictionRecord

TYPE_LABELS = {"manual": "Manual", "image": "Image", "voice": "Voice"}
TRANSCRIPT_PREVIEW_CHARS = 100


def _record_details(record: PredictionRecord) -> str:
    lines = []
    if record.bedrooms is not None:
        area = format_number_en_in(record.area_sqft) if record.area_sqft is not None else "-"
        lines.append(
            f"<p>Bedrooms: {record.bedrooms}, Floors: {record.floors}, Area: {area} sq ft</p>"
        )
    if record.location:
        lines.append(f"<p>Location: {escape(record.location)}</p>")
    if record.amenities:
        lines.append(f"<p>Amenities: {escape(', '.join(record.amenities))}</p>")
    if record.voice_transcript:
        text = record.voice_transcript
        if len(text) > TRANSCRIPT_PREVIEW_CHARS:
            text = text[:TRANSCRIPT_PREVIEW_CHARS] + "..."
        lines.append(f"<p>Description: {escape(text)}</p>")
    if record.image_url:
        lines.append(
            f'<img class="preview" style="max-height:160px" alt="Property" src="{escape(record.image_url)}">'
        )
    if not lines:
        return ""
    return f'<div class="muted">{"".join(lines)}</div>'


def render_history_item(record: PredictionRecord) -> str:
    return f"""<div class="card history-item" data-prediction-id="{escape(record.id)}">
            <div>
                <span class="badge">{TYPE_LABELS.get(record.prediction_type, record.prediction_type)}</span>
                <p class="price">{format_inr(record.predicted_price)}</p>
                <p class="muted">{format_timestamp_en_in(record.created_at)}</p>
                {_record_details(record)}
            </div>
            <form method="post" action="/history/{escape(record.id)}/delete" class="delete-form">
                <button type="submit" class="secondary" aria-label="Delete prediction">Delete</button>
            </form>
        </div>"""


def get_history_page_html(
    user,
    records: list[PredictionRecord],
    notification: Optional[Notification] = None,
) -> str:
    items = "".join(render_history_item(record) for record in records)
    hidden = " hidden" if records else ""
    body = f"""
        <h1>Prediction History</h1>
        <div id="history-list">{items}</div>
        <div class="card" style="text-align:center" id="history-empty"{hidden}>
            <h2>No predictions yet</h2>
            <p class="muted">Start by making your first price prediction</p>
            <a class="button" href="/predict/manual">Make Your First Prediction</a>
        </div>
    """

    # Remove the card immediately, put it back if the delete fails
    script = """
    <script>
    document.querySelectorAll('.delete-form').forEach(function (form) {
        form.addEventListener('submit', function (e) {
            e.preventDefault();
            var card = form.closest('.history-item');
            var id = card.getAttribute('data-prediction-id');
            var list = document.getElementById('history-list');
            var empty = document.getElementById('history-empty');
            var next = card.nextSibling;
            card.remove();
            fetch('/api/predictions/' + encodeURIComponent(id), {method: 'DELETE', credentials: 'same-origin'})
                .then(function (r) {
                    if (!r.ok) { throw new Error('delete failed'); }
                    showToast('Deleted', 'Prediction removed from history', false);
                    if (!list.querySelector('.history-item')) { empty.hidden = false; }
                })
                .catch(function () {
                    list.insertBefore(card, next);
                    showToast('Error', 'Failed to delete prediction', true);
                });
        });
    });
    </script>
    """
    return render_page(
        "History",
        body,
        user=user,
        active_path="/history",
        notification=notification,
        requires_session=True,
        extra_scripts=script,
    )
