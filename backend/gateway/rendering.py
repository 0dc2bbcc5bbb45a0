"""
HTML fragments for the admin page and upload responses.

Fragments are swapped into the page by htmx, so only the admin page itself
is a full document.
"""

from html import escape
from typing import Iterable

HTMX_SCRIPT_URL = "https://unpkg.com/htmx.org@1.9.10"

_PAGE_STYLE = """
<style>
  .loading { display: none; }
  .htmx-request.loading { display: inline; }
</style>
"""

_COPY_SCRIPT = """
<script>
  window.addEventListener('click', function (event) {
    const button = event.target.closest('button[data-url]');
    if (button) {
      const textToCopy = location.origin + '/' + button.getAttribute('data-url');
      navigator.clipboard.writeText(textToCopy);
    }
  });
</script>
"""


def render_image_card(file_name: str) -> str:
    """Link, copy button, provenance trigger and preview for one key."""
    name = escape(file_name, quote=True)
    return (
        "<div>"
        f'<a href="/{name}">{name}</a> '
        f'<button data-url="{name}">copy url</button> '
        f'<button hx-get="/admin/{name}/src" hx-swap="outerHTML">src</button>'
        "<br />"
        f'<img src="/{name}" width="300" />'
        "</div>"
    )


def render_uploaded(file_name: str) -> str:
    return f"<div>Uploaded{render_image_card(file_name)}</div>"


def render_source_link(source_url: str) -> str:
    url = escape(source_url, quote=True)
    return f'<a href="{url}" target="_blank">{url}</a>'


def render_admin_page(keys: Iterable[str]) -> str:
    items = "".join(f"<li>{render_image_card(key)}</li>" for key in keys)
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <script src="{HTMX_SCRIPT_URL}"></script>
    <title>Figma Images</title>
  </head>
  <body>
    {_PAGE_STYLE}
    <h1>My Figma Images</h1>
    <form hx-post="/upload" hx-target="#uploaded" hx-swap="afterend" hx-indicator=".loading">
      <input type="text" name="figmaUrl" placeholder="Figma URL" />
      <button type="submit">Upload</button>
    </form>
    <div class="loading">Uploading...</div>
    <div id="uploaded"></div>
    <ul>{items}</ul>
    {_COPY_SCRIPT}
  </body>
</html>
"""
