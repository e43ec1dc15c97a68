# app/pages/home.py
"""Landing page and sign-in page."""
from __future__ import annotations

from html import escape
from typing import Optional

from app.pages.layout import render_page
from app.prediction_flow import Notification

FEATURES = [
    (
        "/predict/manual",
        "Manual Entry",
        "Enter bedrooms, floors, area, location and amenities for a detailed estimate.",
    ),
    (
        "/predict/image",
        "Image Analysis",
        "Upload a photo of the property and let the AI assess quality and ambiance.",
    ),
    (
        "/predict/voice",
        "Voice Input",
        "Describe the house out loud, in any language, and get an instant estimate.",
    ),
]


def get_home_page_html(user=None) -> str:
    cards = "".join(
        f"""<a class="card" href="{href}" style="text-decoration:none;color:inherit">
                <h2>{title}</h2>
                <p class="muted">{text}</p>
            </a>"""
        for href, title, text in FEATURES
    )
    cta = (
        '<a class="button" href="/predict/manual">Start Predicting</a>'
        if user is not None
        else '<a class="button" href="/auth">Get Started</a>'
    )
    body = f"""
        <section style="text-align:center;margin-bottom:3rem">
            <h1>AI-Powered House Price Prediction</h1>
            <p class="muted">Estimate property prices in Indian Rupees from a form, a photo or your voice.</p>
            {cta}
        </section>
        <section class="grid">{cards}</section>
    """
    return render_page("Home", body, user=user, active_path="/")


def get_auth_page_html(
    notification: Optional[Notification] = None,
    email: str = "",
    mode: str = "signin",
) -> str:
    """Sign-in / sign-up form. mode picks which button is primary."""
    signup_first = mode == "signup"
    primary, secondary = ("signup", "signin") if signup_first else ("signin", "signup")
    labels = {"signin": "Sign In", "signup": "Create Account"}

    body = f"""
        <div class="card" style="max-width:420px;margin:0 auto">
            <h2>Welcome to ValueMatrix</h2>
            <p class="muted">Sign in or create an account to start predicting.</p>
            <form method="post" action="/auth">
                <label for="email">Email</label>
                <input id="email" name="email" type="email" value="{escape(email)}" required>
                <label for="password">Password</label>
                <input id="password" name="password" type="password" minlength="6" required>
                <button type="submit" name="mode" value="{primary}">{labels[primary]}</button>
                <button type="submit" name="mode" value="{secondary}" class="secondary">{labels[secondary]}</button>
            </form>
        </div>
    """
    return render_page("Sign In", body, user=None, active_path="/auth", notification=notification)
