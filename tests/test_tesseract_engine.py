import numpy as np
import pytest
import pytesseract

from core.errors import RecognitionUnavailableError
from core.recognition.tesseract_engine import TesseractEngine, assemble_output


def word_data(rows):
    keys = ("page_num", "block_num", "par_num", "line_num", "text", "conf")
    return {key: [row[i] for row in rows] for i, key in enumerate(keys)}


def test_assemble_output_rebuilds_lines():
    data = word_data(
        [
            (1, 1, 1, 0, "", "-1"),
            (1, 1, 1, 1, "Nordic", "90"),
            (1, 1, 1, 1, "Spirit", "80"),
            (1, 1, 1, 2, "Mint", 70),
            (1, 2, 1, 1, "  ", "-1"),
            (1, 2, 1, 1, "6mg", "-1"),
        ]
    )
    output = assemble_output(data)
    assert output.text == "Nordic Spirit\nMint\n6mg"
    assert output.confidence == pytest.approx(0.8)


def test_assemble_output_without_words():
    output = assemble_output(word_data([(1, 1, 0, 0, "", "-1")]))
    assert output.text == ""
    assert output.confidence == 0.0


def test_missing_binary_is_unavailable(monkeypatch):
    def missing():
        raise pytesseract.TesseractNotFoundError()

    monkeypatch.setattr(pytesseract, "get_tesseract_version", missing)
    with pytest.raises(RecognitionUnavailableError):
        TesseractEngine().ensure_initialized()


def test_recognize_uses_word_data(monkeypatch):
    calls = {}

    def fake_image_to_data(image, lang, config, timeout, output_type):
        calls.update(lang=lang, config=config, size=image.size)
        return word_data([(1, 1, 1, 1, "Zyn", "95")])

    monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
    monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)

    progress = []
    engine = TesseractEngine(psm=6)
    output = engine.recognize(np.zeros((10, 20, 3), dtype=np.uint8), "swe", progress=progress.append)

    assert output.text == "Zyn"
    assert output.confidence == pytest.approx(0.95)
    assert calls == {"lang": "swe", "config": "--psm 6", "size": (20, 10)}
    assert progress == [0.0, 1.0]
