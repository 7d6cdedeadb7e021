import pytest

from errors import EncodingError
from text_codec import TextCodec, as_text, lower_keys


@pytest.mark.parametrize("encoding", [None, "", "  ", "utf-8", "UTF-8", "utf8", "UTF_8"])
def test_identity_when_encoding_unset_or_canonical(encoding: str | None) -> None:
    codec = TextCodec(encoding)
    assert codec.is_identity is True
    assert codec.encode("Café") == "Café"
    assert codec.decode("Café") == "Café"


def test_encode_converts_text_to_external_bytes() -> None:
    codec = TextCodec("latin-1")
    assert codec.encode("Café") == b"Caf\xe9"


def test_decode_converts_external_bytes_to_text() -> None:
    codec = TextCodec("cp1252")
    assert codec.decode(b"Caf\xe9 \x80") == "Café €"


@pytest.mark.parametrize("encoding", ["latin-1", "cp1252", "utf-16", "koi8-r", "shift_jis"])
@pytest.mark.parametrize("text", ["", "Math 101", "  padded  "])
def test_decode_encode_round_trip(encoding: str, text: str) -> None:
    codec = TextCodec(encoding)
    assert codec.decode(codec.encode(text)) == text


@pytest.mark.parametrize(
    ("encoding", "text"),
    [
        ("latin-1", "Introducción à la Physique"),
        ("cp1252", "Résumé – Übung €"),
        ("koi8-r", "Математика"),
        ("shift_jis", "数学入門"),
    ],
)
def test_round_trip_with_non_ascii_text(encoding: str, text: str) -> None:
    codec = TextCodec(encoding)
    assert codec.decode(codec.encode(text)) == text


def test_mappings_are_converted_value_by_value() -> None:
    codec = TextCodec("latin-1")
    encoded = codec.encode({"fullname": "Café", "id": 7, "missing": None})
    assert encoded == {"fullname": b"Caf\xe9", "id": 7, "missing": None}
    assert codec.decode(encoded) == {"fullname": "Café", "id": 7, "missing": None}


def test_decode_leaves_text_values_alone() -> None:
    codec = TextCodec("latin-1")
    assert codec.decode("already text") == "already text"


def test_encode_unrepresentable_text_raises() -> None:
    codec = TextCodec("latin-1")
    with pytest.raises(EncodingError):
        codec.encode("数学")


def test_decode_invalid_bytes_raises() -> None:
    codec = TextCodec("ascii")
    with pytest.raises(EncodingError):
        codec.decode(b"\xff")


def test_unknown_encoding_raises() -> None:
    with pytest.raises(EncodingError):
        TextCodec("no-such-encoding")


def test_lower_keys() -> None:
    assert lower_keys({"FULLNAME": "A", "ShortName": "B", "idnumber": "X"}) == {
        "fullname": "A",
        "shortname": "B",
        "idnumber": "X",
    }


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, ""), ("A", "A"), (42, "42"), (b"Caf\xc3\xa9", "Café")],
)
def test_as_text(value: object, expected: str) -> None:
    assert as_text(value) == expected
