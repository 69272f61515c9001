# tests/test_corpus.py

import pytest

from conftest import encode_png, gradient_image, write_image
from core.corpus import CorpusIndex, ReferenceImage
from core.errors import CorpusError


def test_missing_directory_is_empty(tmp_path):
    assert CorpusIndex(tmp_path / "does_not_exist").list_references() == []


def test_empty_directory_is_empty(tmp_path):
    assert CorpusIndex(tmp_path).list_references() == []


def test_lists_only_supported_raster_files(tmp_path):
    data = encode_png(gradient_image(32))
    for name in ["b.png", "a.JPG", "c.tif", "d.TIFF", "e.bmp", "f.jpeg"]:
        (tmp_path / name).write_bytes(data)
    (tmp_path / "notes.txt").write_text("not an image")
    (tmp_path / "animation.gif").write_bytes(b"GIF89a")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "deep.png").write_bytes(data)

    names = [ref.name for ref in CorpusIndex(tmp_path).list_references()]

    assert names == ["a.JPG", "b.png", "c.tif", "d.TIFF", "e.bmp", "f.jpeg"]


def test_reference_records_size(tmp_path):
    path = write_image(tmp_path / "invoice.png", gradient_image(32))
    reference = CorpusIndex(tmp_path).list_references()[0]

    assert reference.size_bytes == path.stat().st_size
    assert reference.path == path


def test_reference_stem_is_case_insensitive():
    reference = ReferenceImage(name="Invoice123.JPG", path=None, size_bytes=0)
    assert reference.stem == "invoice123"


def test_find_by_stem(tmp_path):
    write_image(tmp_path / "invoice123.jpg", gradient_image(32))
    corpus = CorpusIndex(tmp_path)

    assert corpus.find_by_stem("INVOICE123").name == "invoice123.jpg"
    assert corpus.find_by_stem("invoice124") is None


def test_add_reference_creates_directory(tmp_path):
    corpus = CorpusIndex(tmp_path / "new" / "genuine")
    data = encode_png(gradient_image(32))

    reference = corpus.add_reference(data, "passport_genuine.png")

    assert reference.name == "passport_genuine.png"
    assert reference.size_bytes == len(data)
    assert reference.path.read_bytes() == data
    assert [ref.name for ref in corpus.list_references()] == ["passport_genuine.png"]


def test_add_reference_leaves_no_temp_files(tmp_path):
    corpus = CorpusIndex(tmp_path)
    corpus.add_reference(encode_png(gradient_image(32)), "doc.png")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["doc.png"]


def test_add_reference_rejects_duplicate(tmp_path):
    corpus = CorpusIndex(tmp_path)
    data = encode_png(gradient_image(32))
    corpus.add_reference(data, "doc.png")

    with pytest.raises(CorpusError):
        corpus.add_reference(data, "doc.png")


def test_add_reference_rejects_unsupported_format(tmp_path):
    with pytest.raises(CorpusError):
        CorpusIndex(tmp_path).add_reference(b"GIF89a", "doc.gif")


def test_add_reference_stays_inside_corpus(tmp_path):
    corpus_dir = tmp_path / "genuine"
    reference = CorpusIndex(corpus_dir).add_reference(
        encode_png(gradient_image(32)), "../../escape.png"
    )

    assert reference.path.parent == corpus_dir
    assert not (tmp_path / "escape.png").exists()
