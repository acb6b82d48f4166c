"""
Unit tests for OCR text extraction.

Network and tesseract are replaced by the fake_services fixture, or by
monkeypatching pytesseract.
"""

import types
from io import BytesIO

import pytest
from PIL import Image

from tweet_media import ocr
from tweet_media.models import MediaKind, MediaReference


def image_ref(url):
    return MediaReference(MediaKind.IMAGE, url)


class TestVideoStillUrl:
    """Tests for video_still_url()"""

    def test_mp4_rewritten(self):
        assert ocr.video_still_url("https://video.twimg.com/x/clip.mp4") == "https://video.twimg.com/x/clip.jpg"

    def test_mov_with_query(self):
        assert ocr.video_still_url("https://video.twimg.com/x/clip.MOV?tag=12") == "https://video.twimg.com/x/clip.jpg?tag=12"

    def test_image_url_unchanged(self):
        url = "https://pbs.twimg.com/ext_tw_video_thumb/1/pu/img/a.jpg"
        assert ocr.video_still_url(url) == url


class TestRecognizeText:
    """Tests for recognize_text()"""

    def test_releases_image_and_uses_english(self, monkeypatch):
        called = {}

        class DummyImg:
            def __enter__(self):
                called['enter'] = True
                return self

            def __exit__(self, exc_type, exc, tb):
                called['exit'] = True

        def fake_open(data):
            called['data'] = data.getvalue()
            return DummyImg()

        def fake_image_to_string(img, lang):
            called['lang'] = lang
            return "  Hello OCR \n"

        monkeypatch.setattr(ocr, "Image", types.SimpleNamespace(open=fake_open))
        monkeypatch.setattr(ocr, "pytesseract", types.SimpleNamespace(image_to_string=fake_image_to_string))

        assert ocr.recognize_text(b"img") == "Hello OCR"
        assert called['enter'] and called['exit']
        assert called['data'] == b"img"
        assert called['lang'] == "eng"

    def test_image_released_when_tesseract_fails(self, monkeypatch):
        called = {}

        class DummyImg:
            def __enter__(self):
                return self

            def __exit__(self, exc_type, exc, tb):
                called['exit'] = True

        def failing(img, lang):
            raise RuntimeError("tesseract crashed")

        monkeypatch.setattr(ocr, "Image", types.SimpleNamespace(open=lambda data: DummyImg()))
        monkeypatch.setattr(ocr, "pytesseract", types.SimpleNamespace(image_to_string=failing))

        with pytest.raises(RuntimeError):
            ocr.recognize_text(b"img")
        assert called['exit']

    def test_real_png_bytes(self, monkeypatch):
        buffer = BytesIO()
        Image.new('RGB', (8, 8), 'white').save(buffer, format='PNG')

        monkeypatch.setattr(ocr.pytesseract, "image_to_string", lambda img, lang: "SALE 50%\n")
        assert ocr.recognize_text(buffer.getvalue()) == "SALE 50%"


class TestExtractText:
    """Tests for extract_text() with fake collaborators."""

    def test_direct_image(self, fake_services):
        url = "https://pbs.twimg.com/media/XYZ.jpg"
        services = fake_services(texts={url: "  HELLO \n"})
        assert ocr.extract_text(image_ref(url), services) == "HELLO"
        assert services.calls['expand'] == []

    def test_short_link_expanded_before_resolving(self, fake_services):
        short = "https://t.co/abc"
        final = "https://pbs.twimg.com/media/Q.png"
        services = fake_services(texts={final: "Q"}, expanded={short: final})
        assert ocr.extract_text(image_ref(short), services) == "Q"
        assert services.calls['resolve'] == [final]

    def test_short_link_expansion_failure(self, fake_services):
        services = fake_services()
        assert ocr.extract_text(image_ref("https://t.co/broken"), services) == ""
        assert services.calls['resolve'] == []

    def test_resolver_failure(self, fake_services):
        services = fake_services(resolve=lambda url: None)
        assert ocr.extract_text(image_ref("https://twitter.com/a/status/1/photo/1"), services) == ""
        assert services.calls['fetch'] == []

    def test_resolver_false_positive_rejected(self, fake_services):
        services = fake_services(resolve=lambda url: "https://pbs.twimg.com/profile_banners/1/2")
        assert ocr.extract_text(image_ref("https://twitter.com/a/status/1/photo/1"), services) == ""
        assert services.calls['fetch'] == []

    def test_empty_image_body(self, fake_services):
        services = fake_services()
        services.image_fetcher = lambda url: b""
        assert ocr.extract_text(image_ref("https://pbs.twimg.com/media/E.jpg"), services) == ""

    def test_recognizer_exception_returns_empty(self, fake_services):
        services = fake_services()

        def boom(data):
            raise OSError("cannot identify image file")

        services.recognizer = boom
        assert ocr.extract_text(image_ref("https://pbs.twimg.com/media/E.jpg"), services) == ""

    def test_video_uses_still_frame(self, fake_services):
        services = fake_services(texts={"https://video.twimg.com/v/clip.jpg": "frame text"})
        ref = MediaReference(MediaKind.VIDEO, "https://video.twimg.com/v/clip.mp4")
        assert ocr.extract_text(ref, services) == "frame text"
        assert services.calls['resolve'] == ["https://video.twimg.com/v/clip.jpg"]
