"""
Minimal HTML views.

Templates are autoescaped and only ever receive display data; tokens are
never passed to them.
"""
from jinja2 import DictLoader, Environment, select_autoescape

from authgate.models.profile import DisplayProfile

INDEX_TEMPLATE = """\
{% for provider in providers %}
    <p><a href="/auth/{{ provider.name }}">Log in with {{ provider.display_name }}</a></p>
{% endfor %}"""

USER_TEMPLATE = """\
<p><a href="/logout/{{ user.provider }}">logout</a></p>
<p>Name: {{ user.name }} [{{ user.last_name }}, {{ user.first_name }}]</p>
<p>Email: {{ user.email }}</p>
<p>NickName: {{ user.nickname }}</p>
<p>Location: {{ user.location }}</p>
<p>AvatarURL: {{ user.avatar_url }}{% if user.avatar_url %} <img src="{{ user.avatar_url }}">{% endif %}</p>
<p>Description: {{ user.description }}</p>
<p>UserID: {{ user.user_id }}</p>"""

env = Environment(
    loader=DictLoader({
        "index.html": INDEX_TEMPLATE,
        "user.html": USER_TEMPLATE,
    }),
    autoescape=select_autoescape(default=True, default_for_string=True),
)


def render_index(providers) -> str:
    """Login links for each registered provider (objects with name/display_name)."""
    return env.get_template("index.html").render(providers=providers)


def render_user(user: DisplayProfile) -> str:
    """Authenticated-user view. Accepts the display profile only."""
    return env.get_template("user.html").render(user=user)
