from pixnovel.translation import TranslationResult
from pixnovel.utils.print import print_result_details, result_summary, shorten


def test_shorten():
    assert shorten("abc", 5) == "abc"
    assert shorten("abcdef", 3) == "abc..."


def test_result_summary_replaces_content_with_preview():
    result = TranslationResult(
        novel_id="1", content="<article><p>" + "x" * 200 + "</p></article>",
        duration=0.12345
    )
    summary = result_summary(result, max_len=20)

    assert "content" not in summary
    assert summary["novel_id"] == "1"
    assert summary["success"] is True
    assert summary["length"] == len(result.content)
    assert summary["preview"] == "<article><p>xxxxxxxx..."
    assert summary["duration"] == 0.123


def test_result_summary_shortens_errors():
    result = TranslationResult(novel_id="2", success=False, error="e" * 50)
    summary = result_summary(result, max_len=10)
    assert summary["error"] == "e" * 10 + "..."
    assert summary["length"] == 0
    assert summary["preview"] == ""


def test_print_result_details(capsys):
    results = [
        TranslationResult(novel_id="19284757", content="<article></article>"),
        TranslationResult(novel_id="666", success=False, error="broken"),
    ]
    print_result_details(results)
    out = capsys.readouterr().out
    assert "19284757" in out
    assert "'preview'" in out
    assert "broken" in out
