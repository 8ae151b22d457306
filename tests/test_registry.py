"""Tests for perch.filters.registry — building filters by name."""

import pytest

from perch.errors import ConfigurationError
from perch.filters import LocaleNormalizer, PrefixPath, QueryStripper, ShortCircuit
from perch.filters.registry import FILTER_FACTORIES, build_filter, build_filters


class TestBuildFilter:
    def test_single(self) -> None:
        (built,) = build_filter({"name": "PrefixPath", "prefix": "/myPrefix"})
        assert built == PrefixPath("/myPrefix")

    def test_tuple_factory_spliced(self) -> None:
        built = build_filter({"name": "ModifyRequest", "default_locale": "fr-FR"})
        assert built == (LocaleNormalizer("fr-FR"), QueryStripper())

    def test_defaults(self) -> None:
        (built,) = build_filter({"name": "ShortCircuit"})
        assert built == ShortCircuit()

    def test_missing_name(self) -> None:
        with pytest.raises(ConfigurationError, match="no 'name'"):
            build_filter({"prefix": "/x"})

    def test_entry_must_be_table(self) -> None:
        with pytest.raises(ConfigurationError, match="must be a table"):
            build_filter("PrefixPath")  # type: ignore[arg-type]

    def test_unknown_name_lists_known(self) -> None:
        with pytest.raises(ConfigurationError, match="Known filters: AddRequestHeader"):
            build_filter({"name": "Rewrite"})

    def test_bad_arguments(self) -> None:
        with pytest.raises(ConfigurationError, match="Bad arguments for filter 'PrefixPath'"):
            build_filter({"name": "PrefixPath", "prefix": "/x", "suffix": "/y"})

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigurationError):
            build_filter({"name": "LocaleNormalizer", "default_locale": "??"})

    def test_every_factory_named(self) -> None:
        assert "ModifyRequest" in FILTER_FACTORIES
        assert "StripPrefix" in FILTER_FACTORIES


class TestBuildFilters:
    def test_order_preserved(self) -> None:
        chain = build_filters(
            [
                {"name": "ModifyRequest"},
                {"name": "PrefixPath", "prefix": "/p"},
            ]
        )
        assert [type(f).__name__ for f in chain] == [
            "LocaleNormalizer",
            "QueryStripper",
            "PrefixPath",
        ]

    def test_empty(self) -> None:
        assert build_filters([]) == []
