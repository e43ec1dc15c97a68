# app/pages/predict.py
"""Manual, image and voice prediction pages."""
from __future__ import annotations

from html import escape
from typing import Mapping, Optional

from app.pages.layout import render_page, render_result_card
from app.prediction_flow import AMENITIES, MIN_AREA_SQFT, Notification, PredictionOutcome
from app.uploads import ALLOWED_IMAGE_TYPES


def _form_value(form: Optional[Mapping], name: str) -> str:
    if not form:
        return ""
    value = form.get(name)
    return escape(str(value)) if value is not None else ""


def get_manual_page_html(
    user,
    outcome: Optional[PredictionOutcome] = None,
    form: Optional[Mapping] = None,
    selected_amenities: Optional[list] = None,
) -> str:
    selected = set(selected_amenities or [])
    amenity_boxes = "".join(
        f"""<label><input type="checkbox" name="amenities" value="{escape(a)}"{' checked' if a in selected else ''}> {escape(a)}</label>"""
        for a in AMENITIES
    )

    body = f"""
        <h1>Manual Price Prediction</h1>
        <div class="grid">
            <div class="card">
                <h2>Property Details</h2>
                <p class="muted">Enter the details of the property to get an AI-powered price prediction</p>
                <form method="post" action="/predict/manual" data-pending-label="Predicting...">
                    <label for="bedrooms">Number of Bedrooms</label>
                    <input id="bedrooms" name="bedrooms" type="number" min="1" value="{_form_value(form, 'bedrooms')}" required>
                    <label for="floors">Number of Floors</label>
                    <input id="floors" name="floors" type="number" min="1" value="{_form_value(form, 'floors')}" required>
                    <label for="area_sqft">Area (sq ft)</label>
                    <input id="area_sqft" name="area_sqft" type="number" min="{MIN_AREA_SQFT}" step="any" value="{_form_value(form, 'area_sqft')}" required>
                    <label for="location">Location</label>
                    <input id="location" name="location" type="text" placeholder="e.g., Mumbai, Bangalore, Delhi" value="{_form_value(form, 'location')}" required>
                    <label>Amenities</label>
                    <div class="amenities">{amenity_boxes}</div>
                    <button type="submit">Predict Price</button>
                </form>
            </div>
            {render_result_card(outcome)}
        </div>
    """
    return render_page(
        "Manual Prediction",
        body,
        user=user,
        active_path="/predict/manual",
        notification=outcome.notification if outcome else None,
        requires_session=True,
    )


def get_image_page_html(
    user,
    outcome: Optional[PredictionOutcome] = None,
    image_data_uri: Optional[str] = None,
    notification: Optional[Notification] = None,
) -> str:
    preview = (
        f'<img class="preview" id="image-preview" alt="Selected property" src="{escape(image_data_uri)}">'
        if image_data_uri
        else '<img class="preview" id="image-preview" alt="" hidden>'
    )
    accept = ",".join(ALLOWED_IMAGE_TYPES)

    body = f"""
        <h1>Image Price Prediction</h1>
        <div class="grid">
            <div class="card">
                <h2>Upload Property Image</h2>
                <p class="muted">Upload a photo of the house for AI analysis of ambiance, quality and condition</p>
                <form method="post" action="/predict/image" enctype="multipart/form-data" data-pending-label="Analyzing...">
                    <label for="image">Property photo</label>
                    <input id="image" name="image" type="file" accept="{accept}">
                    {preview}
                    <button type="submit">Predict Price</button>
                </form>
            </div>
            {render_result_card(outcome)}
        </div>
    """
    # Local preview before upload
    script = """
    <script>
    document.getElementById('image').addEventListener('change', function (e) {
        var file = e.target.files && e.target.files[0];
        var preview = document.getElementById('image-preview');
        if (!file) { return; }
        var reader = new FileReader();
        reader.onloadend = function () { preview.src = reader.result; preview.hidden = false; };
        reader.readAsDataURL(file);
    });
    </script>
    """
    if notification is None and outcome is not None:
        notification = outcome.notification

    return render_page(
        "Image Prediction",
        body,
        user=user,
        active_path="/predict/image",
        notification=notification,
        requires_session=True,
        extra_scripts=script,
    )


SPEECH_UNSUPPORTED_MESSAGE = "Speech recognition is not supported in your browser"


def get_voice_page_html(
    user,
    outcome: Optional[PredictionOutcome] = None,
    transcript: str = "",
) -> str:
    body = f"""
        <h1>Voice Price Prediction</h1>
        <div class="grid">
            <div class="card">
                <h2>Describe the Property</h2>
                <p class="muted">Speak in any language to describe the house. Click stop when you're finished.</p>
                <button type="button" id="record-button" class="secondary">Start Recording</button>
                <div class="notice" id="speech-unsupported" hidden>{SPEECH_UNSUPPORTED_MESSAGE}</div>
                <form method="post" action="/predict/voice" data-pending-label="Predicting...">
                    <label for="transcript">Transcript</label>
                    <textarea id="transcript" name="transcript" placeholder="Your description will appear here...">{escape(transcript)}</textarea>
                    <button type="submit">Predict Price</button>
                </form>
            </div>
            {render_result_card(outcome)}
        </div>
    """
    # Browser speech-to-text; without the API the record control is disabled
    script = """
    <script>
    (function () {
        var SpeechRecognition = window.SpeechRecognition || window.webkitSpeechRecognition;
        var button = document.getElementById('record-button');
        var box = document.getElementById('transcript');
        if (!SpeechRecognition) {
            button.disabled = true;
            document.getElementById('speech-unsupported').hidden = false;
            return;
        }
        var recognition = new SpeechRecognition();
        recognition.continuous = true;
        recognition.interimResults = true;
        recognition.lang = 'en-US';
        var recording = false;
        var base = '';
        recognition.onresult = function (event) {
            var text = '';
            for (var i = 0; i < event.results.length; i++) {
                text += event.results[i][0].transcript + ' ';
            }
            box.value = (base + ' ' + text).trim();
        };
        recognition.onerror = function () {
            recording = false;
            button.textContent = 'Start Recording';
            showToast('Error', 'Speech recognition error. Please try again.', true);
        };
        recognition.onend = function () {
            recording = false;
            button.textContent = 'Start Recording';
        };
        button.addEventListener('click', function () {
            if (recording) {
                recognition.stop();
                return;
            }
            base = box.value;
            recognition.start();
            recording = true;
            button.textContent = 'Stop Recording';
        });
    })();
    </script>
    """
    return render_page(
        "Voice Prediction",
        body,
        user=user,
        active_path="/predict/voice",
        notification=outcome.notification if outcome else None,
        requires_session=True,
        extra_scripts=script,
    )
