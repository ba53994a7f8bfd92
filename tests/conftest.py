import json
import pytest


PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<script src="https://s.pximg.net/www/js/build/vendor.js"></script>
<script>window.dataLayer = window.dataLayer || [];</script>
<script>
    Object.defineProperty(window, 'pixiv', {{
        value: {{
            viewerVersion: '20221031_ai',
            novel: {novel},
            isOwnWork: false,
            userId: '27104704'
        }}
    }});
</script>
</head>
<body><div id="root"></div></body>
</html>
"""


def build_page(novel) -> str:
    """Webview page embedding novel, either a dict or a raw literal."""
    literal = novel if isinstance(novel, str) else json.dumps(novel, ensure_ascii=False)
    return PAGE_TEMPLATE.format(novel=literal)


@pytest.fixture
def make_page():
    return build_page


@pytest.fixture
def novel_data():
    return {
        "id": "19284757",
        "title": "Test novel",
        "text": "Hello\n\n[chapter:Two]\nWorld[uploadedimage:5]",
        "images": {
            "5": {
                "novelImageId": "5",
                "sl": "0",
                "urls": {
                    "240mw": "https://i.pximg.net/c/240x480/img/5_240.jpg",
                    "original": "https://i.pximg.net/img/5.jpg",
                },
            }
        },
    }
