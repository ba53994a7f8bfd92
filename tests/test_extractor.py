import pytest
from pixnovel.errors import MalformedPayload, NoEmbeddedData, ExtractionFailure
from pixnovel.translation.extractor import extract, scan_json_object
from pixnovel.translation.payload import NovelPayload


def test_extract_reads_text_and_images(make_page, novel_data):
    payload = extract(make_page(novel_data))

    assert isinstance(payload, NovelPayload)
    assert payload.text == novel_data["text"]
    assert set(payload.images) == {"5"}
    assert payload.images["5"].original_url == "https://i.pximg.net/img/5.jpg"


def test_extract_accepts_flat_original_url(make_page):
    novel = {
        "text": "x",
        "images": {"7": {"original_url": "https://i.pximg.net/img/7.png"}},
    }
    payload = extract(make_page(novel))
    assert payload.images["7"].original_url == "https://i.pximg.net/img/7.png"


@pytest.mark.parametrize("images", [None, [], {}])
def test_extract_empty_images_become_empty_mapping(make_page, images):
    novel = {"text": "x"}
    if images is not None:
        novel["images"] = images
    assert extract(make_page(novel)).images == {}


def test_extract_keeps_braces_inside_text(make_page):
    text = 'She wrote "},\n" and {"novel": 1}, then left.\\ }'
    payload = extract(make_page({"text": text, "images": {}}))
    assert payload.text == text


def test_extract_without_payload_script():
    html = "<html><head><script>var a = 1;</script></head><body></body></html>"
    with pytest.raises(NoEmbeddedData):
        extract(html)


def test_extract_from_empty_document():
    with pytest.raises(NoEmbeddedData):
        extract("")


def test_extract_ignores_marker_outside_scripts():
    html = "<html><body><p>novel: {\"text\": \"x\"}</p></body></html>"
    with pytest.raises(NoEmbeddedData):
        extract(html)


@pytest.mark.parametrize("novel", [
    {"text": "", "images": {}},
    {"text": None},
    {"title": "no text at all"},
])
def test_extract_without_text(make_page, novel):
    with pytest.raises(NoEmbeddedData):
        extract(make_page(novel))


@pytest.mark.parametrize("literal", [
    '{"text": "abc", "images": {',          # truncated brace
    "{text: 'abc'}",                        # JS literal, not JSON
    '{"text": "abc",}',                     # trailing comma
    'null',                                 # not an object
    '{"text": "abc", "images": ["a"}',      # mismatched closer
    '{"text": "abc", "images": "none"}',    # wrong images shape
])
def test_extract_malformed_payload(make_page, literal):
    with pytest.raises(MalformedPayload):
        extract(make_page(literal))


def test_malformed_and_missing_share_base_class():
    assert issubclass(MalformedPayload, ExtractionFailure)
    assert issubclass(NoEmbeddedData, ExtractionFailure)


def test_extract_uses_first_matching_script(make_page):
    first = make_page({"text": "first"})
    second = make_page({"text": "second"})
    html = first.replace("</head>", second.split("<head>")[1].split("</head>")[0] + "</head>")
    assert extract(html).text == "first"


@pytest.mark.parametrize("title", [
    "title: 'My novel: part 1',",
    'description: "novel: see below",',
])
def test_extract_skips_novel_key_not_followed_by_object(make_page, title):
    html = make_page({"text": "body"}).replace(
        "viewerVersion:", f"{title}\n            viewerVersion:"
    )
    assert extract(html).text == "body"


@pytest.mark.parametrize("text,expected", [
    ('{"a": 1}, isOwnWork', '{"a": 1}'),
    ('{"a": "}"}, x', '{"a": "}"}'),
    ('{"a": "\\"}"}, x', '{"a": "\\"}"}'),
    ('{"a": "\\\\"}, "b"', '{"a": "\\\\"}'),
    ('{"a": {"b": [1, {"c": 2}]}}\n}', '{"a": {"b": [1, {"c": 2}]}}'),
    ('{"a": "},\\n"},\n', '{"a": "},\\n"}'),
])
def test_scan_json_object(text, expected):
    end = scan_json_object(text, 0)
    assert text[:end] == expected


def test_scan_json_object_from_offset():
    text = 'novel: {"x": [1, 2]}, isOwnWork: true'
    start = text.index("{")
    assert text[start:scan_json_object(text, start)] == '{"x": [1, 2]}'


@pytest.mark.parametrize("text", [
    '{"a": 1',
    '{"a": "}',
    '{"a": [1}',
    '{"a": 1]}',
    'x{"a": 1}',
    '',
])
def test_scan_json_object_rejects_unbalanced(text):
    with pytest.raises(MalformedPayload):
        scan_json_object(text, 0)
