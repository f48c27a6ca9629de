from submission_report.pipeline.report.escaping import (
    escape_attribute,
    escape_html,
    format_multiline,
)


def test_escape_html_replaces_five_characters():
    assert escape_html("<b>&'\"") == "&lt;b&gt;&amp;&#39;&quot;"


def test_escape_html_leaves_backtick_and_plain_text():
    assert escape_html("plain `text`") == "plain `text`"


def test_escape_html_stringifies_numbers():
    assert escape_html(87.5) == "87.5"


def test_escape_attribute_covers_backtick():
    assert escape_attribute('x" onerror=`a`') == "x&quot; onerror=&#96;a&#96;"


def test_format_multiline_escapes_before_breaking_lines():
    assert format_multiline("Good <b>\nwork") == "Good &lt;b&gt;<br />work"
