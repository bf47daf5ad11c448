import pytest

from domain.slugs import is_valid_slug, slugify


@pytest.mark.parametrize(
    "value,expected",
    [
        ("Ficção", "ficcao"),
        ("Autora X", "autora-x"),
        ("  O Senhor dos Anéis: Volume 1 ", "o-senhor-dos-aneis-volume-1"),
        ("Ação & Aventura", "acao-aventura"),
        ("!!!", ""),
    ],
)
def test_slugify(value, expected):
    assert slugify(value) == expected


def test_is_valid_slug():
    assert is_valid_slug("autora-x")
    assert is_valid_slug("livro2")
    assert not is_valid_slug("Autora-X")
    assert not is_valid_slug("two--hyphens")
    assert not is_valid_slug("-leading")
    assert not is_valid_slug("com espaço")
