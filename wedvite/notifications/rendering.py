"""Render HTML email bodies from Jinja2 templates."""
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def format_event_date(value: datetime) -> str:
    """Long date used in emails, e.g. "Saturday, June 12, 2027"."""
    return f"{value:%A, %B} {value.day}, {value.year}"


env.filters["long_date"] = format_event_date


def render_email(template_name: str, **context) -> str:
    return env.get_template(f"{template_name}.html").render(**context)
