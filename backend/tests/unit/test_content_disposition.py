from app.api.v1.endpoints.videos import content_disposition


def test_ascii_name_is_kept():
    assert content_disposition("clip.mp4") == (
        "inline; filename=\"clip.mp4\"; filename*=UTF-8''clip.mp4"
    )


def test_non_ascii_name_gets_fallback_and_utf8_form():
    header = content_disposition("кино.mp4")

    assert header.startswith('inline; filename="file.mp4"; ')
    assert header.endswith("filename*=UTF-8''%D0%BA%D0%B8%D0%BD%D0%BE.mp4")
    header.encode("latin-1")


def test_quotes_cannot_break_the_header():
    header = content_disposition('my "best" take.mp4')

    assert header.startswith('inline; filename="my _best_ take.mp4"; ')
    assert header.endswith("filename*=UTF-8''my%20%22best%22%20take.mp4")
