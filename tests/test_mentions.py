from farrier.services.mentions import (
    Mention,
    build_notification_message,
    emphasize_names,
    extract_mentions,
    render_for_horse,
    strip_mentions,
)


def test_extract_mentions_in_order_without_duplicates():
    text = "@[Jane](abc123) and @[Star](42) then @[Jane](abc123) again"
    assert extract_mentions(text) == [Mention("Jane", "abc123"), Mention("Star", "42")]


def test_strip_mentions_keeps_display_name():
    assert strip_mentions("Great job @[Jane](abc123)!") == "Great job @Jane!"
    assert strip_mentions("no mentions here") == "no mentions here"


def test_notification_message_emphasises_names():
    message = build_notification_message("Great job @[Jane](abc123)!")
    assert message == "Great job <strong>Jane</strong>!"


def test_notification_message_escapes_other_markup():
    message = build_notification_message("<script>x</script> @[Jane](abc123) & co")
    assert "<script>" not in message
    assert "&lt;script&gt;" in message
    assert "<strong>Jane</strong>" in message
    assert "&amp; co" in message


def test_shorter_name_does_not_clip_longer_one():
    message = emphasize_names("@Anna and @Ann", ["Ann", "Anna"])
    assert message == "<strong>Anna</strong> and <strong>Ann</strong>"


def test_render_for_horse_keeps_only_current_horse_bold():
    message = "<strong>Jane</strong> trimmed <strong>Star</strong> and <strong>Blaze</strong>"
    assert render_for_horse(message, "star") == "Jane trimmed <strong>Star</strong> and Blaze"
