"""
services/notification/formatter.py
Message templates and the grammar helpers used to fill them.

Everything here is pure: a template name plus the records it talks about go
in, a rendered subject/body comes out.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from shared.utils.errors import UnknownTemplate

BRAND = "Tutorbook"
APP_URL = "https://tutorbook.app/app"


@dataclass(frozen=True)
class RenderedMessage:
    subject: Optional[str]
    body: str
    sms: str


# ── Grammar Helpers ───────────────────────────────────────────

def pronoun(gender: Any) -> str:
    """Possessive pronoun for a gender category; "their" unless exactly Male/Female."""
    if gender == "Male":
        return "his"
    if gender == "Female":
        return "her"
    return "their"


def title_case(word: str) -> str:
    """Uppercase only the first character."""
    return word[:1].upper() + word[1:]


def first_name(name: str) -> str:
    return name.split(" ")[0] if name else ""


# ── Notification Templates ────────────────────────────────────

TEMPLATES: Dict[str, Dict[str, Optional[str]]] = {
    "welcome": {
        "subject": "Welcome to {brand}!",
        "body": (
            "Welcome to {brand}! This is how you'll receive SMS notifications. "
            "To turn them off, go to settings and toggle SMS notifications off."
        ),
        "sms": None,
    },
    "request": {
        "subject": "New lesson request from {from_name}",
        "body": (
            "{from_name} wants you as a {role} for {subject}. Log into your "
            "{brand} dashboard ({app_url}) to approve or modify this request."
        ),
        "sms": None,
    },
    "approved-appointment": {
        "subject": "{approver} approved your lesson request",
        "body": (
            "{approver} approved your lesson request. You now have tutoring "
            "appointments for {subject} with {tutor_first} on {day}s at the "
            "{location} from {start} until {end}."
        ),
        "sms": None,
    },
    "chat-invite": {
        "subject": "Chat with {creator}",
        "body": (
            "{creator} wants to chat with you. Log into {brand} "
            "({app_url}/messages) to respond to {pronoun} messages."
        ),
        "sms": None,
    },
    "message-alert": {
        "subject": "Message from {sender}",
        "body": "{message}",
        "sms": "New message from {sender_first}: {message}",
    },
    "feedback-alert": {
        "subject": "Feedback from {sender}",
        "body": "Feedback from {sender}: {message}",
        "sms": None,
    },
    "appointment-reminder": {
        "subject": "Upcoming tutoring session",
        "body": (
            "{supervisor} wanted to remind you that you have a tutoring session "
            "for {subject} in the {location} on {day} at {start}."
        ),
        "sms": None,
    },
}


# Each builder maps the records a template talks about to its placeholders.

def _welcome_vars(data: Mapping[str, Any]) -> dict:
    return {}


def _request_vars(data: Mapping[str, Any]) -> dict:
    request = data["request"]
    return {
        "from_name": request.from_user.name,
        "role": (request.to_user.role or "tutor").lower(),
        "subject": request.subject,
    }


def _approved_vars(data: Mapping[str, Any]) -> dict:
    approved = data["approved_request"]
    request = approved.request
    return {
        "approver": approved.approved_by.name,
        "subject": request.subject,
        "tutor_first": first_name(request.to_user.name),
        "day": request.time.day if request.time else "",
        "start": request.time.start if request.time else "",
        "end": request.time.end if request.time else "",
        "location": request.location.name if request.location else "",
    }


def _chat_invite_vars(data: Mapping[str, Any]) -> dict:
    creator = data["chat"].created_by
    return {"creator": creator.name, "pronoun": pronoun(creator.gender)}


def _message_vars(data: Mapping[str, Any]) -> dict:
    message = data["message"]
    return {
        "sender": message.sent_by.name,
        "sender_first": first_name(message.sent_by.name),
        "message": message.body,
    }


def _feedback_vars(data: Mapping[str, Any]) -> dict:
    feedback = data["feedback"]
    return {"sender": feedback.from_user.name, "message": feedback.message}


def _reminder_vars(data: Mapping[str, Any]) -> dict:
    appt = data["appointment"]
    return {
        "supervisor": data["supervisor"].name,
        "subject": appt.subject,
        "location": appt.location.name,
        "day": appt.time.day,
        "start": appt.time.start,
    }


_VARIABLES: Dict[str, Callable[[Mapping[str, Any]], dict]] = {
    "welcome": _welcome_vars,
    "request": _request_vars,
    "approved-appointment": _approved_vars,
    "chat-invite": _chat_invite_vars,
    "message-alert": _message_vars,
    "feedback-alert": _feedback_vars,
    "appointment-reminder": _reminder_vars,
}


def render(template_name: str, data: Optional[Mapping[str, Any]] = None) -> RenderedMessage:
    """Render a named template. Raises UnknownTemplate for names not in TEMPLATES."""
    try:
        template = TEMPLATES[template_name]
    except KeyError:
        raise UnknownTemplate(template_name)

    vars_ = {"brand": BRAND, "app_url": APP_URL}
    vars_.update(_VARIABLES[template_name](data or {}))

    subject = template["subject"].format(**vars_) if template["subject"] else None
    body = template["body"].format(**vars_)
    sms = template["sms"].format(**vars_) if template["sms"] else body
    return RenderedMessage(subject=subject, body=body, sms=sms)


def render_email_html(message: RenderedMessage) -> str:
    return f"""
        <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background: #0C4A6E; padding: 20px; border-radius: 8px 8px 0 0; text-align: center;">
                <h1 style="color: white; margin: 0;">{BRAND}</h1>
            </div>
            <div style="background: white; padding: 24px; border: 1px solid #eee; border-radius: 0 0 8px 8px;">
                <h2 style="color: #333;">{message.subject or BRAND}</h2>
                <p style="color: #666; line-height: 1.6;">{message.body}</p>
                <p style="color: #999; font-size: 12px; margin-top: 24px;">
                    You received this email because you have an account on {BRAND}.
                </p>
            </div>
        </div>
        """
