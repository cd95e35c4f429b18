"""Sample knowledge-base export trees for testing.

Trees follow the export JSON shape: ``detail`` (id, title, itemType),
ordered ``fields``, ``children``, ``properties`` and optional
``external.information``.
"""

import copy
from typing import Any, Dict, List, Optional


def node(
    node_id: Optional[str],
    title: str = "",
    item_type: str = "Paragraph",
    fields: Optional[List[Dict[str, Any]]] = None,
    children: Optional[List[Dict[str, Any]]] = None,
    information: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Build one export node."""
    data: Dict[str, Any] = {
        "detail": {"id": node_id, "title": title, "itemType": item_type},
        "fields": fields or [],
        "children": children or [],
        "properties": {},
    }
    if information is not None:
        data["external"] = {"information": information}
    return data


def text_field(value: str, name: str = "Text") -> Dict[str, str]:
    return {"name": name, "value": value}


# Root with a single paragraph and no references
SIMPLE_TREE = node(
    "root-1", "Simple page", "Document",
    fields=[text_field("<p>Hello world</p>")],
)

# Document d2 references d3, which links back to d2
OTHER_DOC = node(
    "d2", "OtherDoc", "Document",
    fields=[text_field("OtherDoc", "DocumentTitle")],
    children=[
        node("c2", fields=[text_field('<p>Other body with <a data-itemid="d3">third</a></p>')]),
    ],
)

THIRD_DOC = node(
    "d3", "Third", "Document",
    children=[
        node("c3", fields=[text_field('<p>Back to <a data-itemid="d2">other</a></p>')]),
    ],
)

# Everything the pipeline rewrites, in one tree. Referenced documents sit
# three levels down so that extraction does not inline them.
FULL_TREE = node(
    "root-1", "Home", "Document",
    fields=[
        text_field(
            '<p>Intro with <a data-itemid="d2">other</a> and '
            '<a href="#">example.com</a> and '
            '<a data-itemid="l1">the vendor</a> and '
            '<a href="#safety">safety</a>.</p>'
        ),
    ],
    children=[
        node(
            "s1", "Section",
            children=[
                node("p1", fields=[text_field('<p style="font-size: 10pt">Section body</p>')]),
                node(
                    "sp1", "Shared", "SharedParagraph",
                    fields=[
                        text_field("Safety note", "ParagraphTitle"),
                        text_field("<p>Wear gloves</p>"),
                    ],
                ),
                node("img-1", "Diagram", "Image"),
                node("p2", fields=[text_field("safety", "Bookmark"), text_field("<p>safety first</p>")]),
            ],
        ),
        node(
            "library", "Library",
            children=[
                node("shelf", "Shelf", children=[OTHER_DOC, THIRD_DOC]),
                node("l1", "Vendor", "Link", fields=[text_field("https://vendor.example.org", "URL")]),
            ],
        ),
    ],
)

# Tooltip source: external information entries on the root
TOOLTIP_TREE = node(
    "root-2", "Glossary", "Document",
    fields=[text_field('<p>The <span data-externalid="ext-1">widget</span> term.</p>')],
    information=[
        {"externalId": "ext-1", "informationType": "Definition", "content": "<p>A small part</p>"},
        {
            "externalId": "ext-2",
            "informationType": "Image / screenshot",
            "content": '<p><img itemid="shot-9" /></p>',
        },
    ],
)


def full_request(**overrides: Any) -> Dict[str, Any]:
    """Migration request for FULL_TREE in space TEAM with a separate paragraph hub."""
    request: Dict[str, Any] = {
        "json": copy.deepcopy(FULL_TREE),
        "spaceKey": "TEAM",
        "sharedParagraphSpaceKey": "HUB",
    }
    request.update(overrides)
    return request
