"""Builders for Confluence storage-format constructs.

Tag builders create elements inside an existing soup so that they can be
spliced into the tree being transformed. The ``*_markup`` builders return
text, used where content is assembled before parsing (extraction) or sent
as a whole page body (hub pages).
"""

from html import escape
from itertools import count
from typing import Iterable, Tuple

from bs4 import BeautifulSoup, CData, Tag

MACRO_TAG = "ac:structured-macro"


def _link_body(soup: BeautifulSoup, text: str) -> Tag:
    body = soup.new_tag("ac:plain-text-link-body")
    body.append(CData(text.replace("]]>", "]] >")))
    return body


def page_link(soup: BeautifulSoup, title: str, space_key: str, text: str) -> Tag:
    """``<ac:link>`` to a page addressed by content title and space key."""
    link = soup.new_tag("ac:link")
    link.append(
        soup.new_tag(
            "ri:page",
            attrs={"ri:content-title": title.strip(), "ri:space-key": space_key},
        )
    )
    link.append(_link_body(soup, text or title))
    return link


def url_link(soup: BeautifulSoup, url: str, text: str) -> Tag:
    """``<ac:link>`` to an external URL."""
    link = soup.new_tag("ac:link")
    link.append(soup.new_tag("ri:url", attrs={"ri:value": url}))
    link.append(_link_body(soup, text or url))
    return link


def anchor_link(soup: BeautifulSoup, name: str, text: str) -> Tag:
    """``<ac:link>`` to an anchor on the same page."""
    link = soup.new_tag("ac:link")
    link.append(soup.new_tag("ri:anchor", attrs={"ri:value": name}))
    link.append(_link_body(soup, text or name))
    return link


def anchor_macro(soup: BeautifulSoup, name: str) -> Tag:
    """Anchor target marker named ``name``."""
    macro = soup.new_tag(MACRO_TAG, attrs={"ac:name": "anchor"})
    parameter = soup.new_tag("ac:parameter", attrs={"ac:name": ""})
    parameter.string = name
    macro.append(parameter)
    return macro


def include_macro(soup: BeautifulSoup, space_key: str, title: str) -> Tag:
    """Include (transclusion) macro pointing at another page."""
    macro = soup.new_tag(
        MACRO_TAG, attrs={"ac:name": "include", "ac:schema-version": "1"}
    )
    parameter = soup.new_tag("ac:parameter", attrs={"ac:name": ""})
    link = soup.new_tag("ac:link")
    link.append(
        soup.new_tag(
            "ri:page", attrs={"ri:space-key": space_key, "ri:content-title": title}
        )
    )
    parameter.append(link)
    macro.append(parameter)
    return macro


def task_list(soup: BeautifulSoup, items: Iterable[Tuple[bool, str]]) -> Tag:
    """Checklist with one task per ``(complete, text)`` item."""
    task_list_tag = soup.new_tag("ac:task-list")
    for task_id, (complete, text) in zip(count(1), items):
        task = soup.new_tag("ac:task")
        id_tag = soup.new_tag("ac:task-id")
        id_tag.string = str(task_id)
        status = soup.new_tag("ac:task-status")
        status.string = "complete" if complete else "incomplete"
        body = soup.new_tag("ac:task-body")
        body.string = text
        task.extend([id_tag, status, body])
        task_list_tag.append(task)
    return task_list_tag


def expand_markup(title: str, body: str) -> str:
    """Collapsible section with a visible title and a rich hidden body."""
    return (
        f'<{MACRO_TAG} ac:name="expand">'
        f'<ac:parameter ac:name="title">{title}</ac:parameter>'
        f"<ac:rich-text-body>{body}</ac:rich-text-body>"
        f"</{MACRO_TAG}>"
    )


def image_markup(filename: str) -> str:
    """Image embed referencing an attachment of the page."""
    return (
        f'<p><ac:image><ri:attachment ri:filename="{escape(filename)}"/>'
        f"</ac:image></p>"
    )


def item_reference_markup(item_id: str) -> str:
    """Empty reference site for a node that is published elsewhere."""
    return f'<a data-itemid="{escape(item_id)}"></a>'
