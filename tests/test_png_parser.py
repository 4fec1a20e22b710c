from __future__ import annotations

import base64
import json
import logging

import pytest

from cardpng.exceptions import CardDecodeError, InvalidSignatureError, TruncatedChunkError
from cardpng.png_parser import (
    PNGCardParser,
    decode_card_payload,
    detect_spec_version,
    read_card_metadata,
)
from cardpng.png_writer import rewrite_metadata_chunk
from tests.helpers import card_text, idat_chunk, iend_chunk, ihdr_chunk, make_png, text_chunk

V1_CARD = {
    "name": "Ada",
    "description": "d",
    "personality": "p",
    "scenario": "s",
    "first_mes": "hi",
    "mes_example": "",
}


@pytest.mark.parametrize(
    "card, expected",
    [
        ({"spec": "chara_card_v3"}, "3.0"),
        ({"spec": "chara_card_v2"}, "2.0"),
        (V1_CARD, "1.0"),
        ({"name": "Ada"}, "UNKNOWN"),
        ({"spec": "something_else", **V1_CARD}, "UNKNOWN"),
        (["not", "a", "card"], "UNKNOWN"),
    ],
)
def test_detect_spec_version(card, expected):
    assert detect_spec_version(card) == expected


def test_decode_card_payload():
    assert decode_card_payload(card_text({"a": "é"})) == {"a": "é"}
    with pytest.raises(CardDecodeError):
        decode_card_payload(b"not base64!")
    with pytest.raises(CardDecodeError):
        decode_card_payload(base64.b64encode(b"{not json"))
    with pytest.raises(CardDecodeError):
        decode_card_payload(base64.b64encode(b"\xff\xfe"))


def test_reads_what_writer_wrote(minimal_png):
    card = {"spec": "chara_card_v3", "name": "Ada"}
    parsed = read_card_metadata(rewrite_metadata_chunk(minimal_png, card))
    assert parsed.data == card
    assert parsed.spec_version == "3.0"
    assert parsed.chunk_type == "ccv3"


def test_ccv3_preferred_over_chara():
    png = make_png(
        ihdr_chunk(),
        text_chunk("chara", card_text({"spec": "chara_card_v2"})),
        idat_chunk(),
        text_chunk("CCV3", card_text({"spec": "chara_card_v3"})),
        iend_chunk(),
    )
    parsed = read_card_metadata(png)
    assert parsed.chunk_type == "ccv3"
    assert parsed.spec_version == "3.0"


def test_chara_fallback():
    png = make_png(ihdr_chunk(), text_chunk("Chara", card_text(V1_CARD)), idat_chunk(), iend_chunk())
    parsed = read_card_metadata(png)
    assert parsed.chunk_type == "chara"
    assert parsed.spec_version == "1.0"
    assert parsed.data == V1_CARD


def test_broken_ccv3_falls_back_to_chara(caplog):
    png = make_png(
        ihdr_chunk(),
        text_chunk("ccv3", b"%%%"),
        text_chunk("chara", card_text({"spec": "chara_card_v2"})),
        iend_chunk(),
    )
    with caplog.at_level(logging.WARNING, logger="cardpng.png_parser"):
        parsed = read_card_metadata(png)
    assert parsed.chunk_type == "chara"
    assert any("ccv3" in r.getMessage() for r in caplog.records)


def test_broken_chara_only_raises():
    png = make_png(ihdr_chunk(), text_chunk("chara", b"%%%"), iend_chunk())
    with pytest.raises(CardDecodeError):
        read_card_metadata(png)


def test_no_card(minimal_png):
    png = make_png(ihdr_chunk(), text_chunk("Comment", b"hello"), text_chunk("ccv3", b""), iend_chunk())
    assert read_card_metadata(png) is None
    assert read_card_metadata(minimal_png) is None


def test_missing_iend_tolerated():
    png = make_png(ihdr_chunk(), text_chunk("ccv3", card_text({"name": "Ada"})))
    assert read_card_metadata(png).data == {"name": "Ada"}


def test_errors_propagate():
    with pytest.raises(InvalidSignatureError):
        read_card_metadata(b"not a png at all")
    with pytest.raises(TruncatedChunkError):
        read_card_metadata(make_png(ihdr_chunk(), idat_chunk())[:-3])


def test_parser_from_file(png_file):
    assert PNGCardParser(file_path=str(png_file)).parse() is None


def test_parser_requires_input():
    with pytest.raises(ValueError):
        PNGCardParser()


def test_unpadded_chara_payload():
    text = base64.b64encode(b'{"name": "Ad"}').rstrip(b"=")
    assert not text.endswith(b"=")
    png = make_png(ihdr_chunk(), text_chunk("chara", text), iend_chunk())
    parsed = read_card_metadata(png)
    assert parsed.data == {"name": "Ad"}
    assert parsed.chunk_type == "chara"


def test_lenient_payload_forms():
    raw = '{"name": "Ада", "x": "~~~???"}'.encode("utf-8")
    padded = base64.b64encode(raw)
    assert decode_card_payload(padded.rstrip(b"=")) == json.loads(raw)
    assert decode_card_payload(base64.urlsafe_b64encode(raw).rstrip(b"=")) == json.loads(raw)
    assert decode_card_payload(b" " + padded[:10] + b"\r\n" + padded[10:] + b"\n") == json.loads(raw)


def test_truncated_tail_after_chara_returns_card(caplog):
    png = make_png(ihdr_chunk(), text_chunk("chara", card_text({"a": 1})), idat_chunk())[:-3]
    with caplog.at_level(logging.WARNING, logger="cardpng.png_parser"):
        parsed = read_card_metadata(png)
    assert parsed.data == {"a": 1}
    assert parsed.chunk_type == "chara"
    assert any("truncated" in r.getMessage() for r in caplog.records)


def test_truncated_tail_without_card_raises():
    png = make_png(ihdr_chunk(), text_chunk("Comment", b"hi"), idat_chunk())[:-3]
    with pytest.raises(TruncatedChunkError):
        read_card_metadata(png)
