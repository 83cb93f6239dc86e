from __future__ import annotations

from msgharvest.extractor import Candidate, extract_candidate
from msgharvest.registry import SignatureRegistry


def test_gettext_literal_text(make_call, registry: SignatureRegistry) -> None:
    candidate = extract_candidate(make_call("gettext", "Hello"), registry["gettext"])

    assert candidate == Candidate("Hello")
    assert candidate.context == ""
    assert candidate.plural_text is None


def test_missing_text_argument_rejects_call(make_call, registry: SignatureRegistry) -> None:
    assert extract_candidate(make_call("gettext"), registry["gettext"]) is None
    assert extract_candidate(make_call("pgettext", "menu"), registry["pgettext"]) is None


def test_non_literal_text_rejects_call(make_call, registry: SignatureRegistry) -> None:
    assert extract_candidate(make_call("gettext", None), registry["gettext"]) is None
    assert extract_candidate(make_call("pgettext", "menu", None), registry["pgettext"]) is None


def test_empty_string_is_a_valid_text(make_call, registry: SignatureRegistry) -> None:
    assert extract_candidate(make_call("gettext", ""), registry["gettext"]) == Candidate("")


def test_plural_and_context(make_call, registry: SignatureRegistry) -> None:
    call = make_call("npgettext", "cart", "%d item", "%d items", None)

    candidate = extract_candidate(call, registry["npgettext"])

    assert candidate == Candidate("%d item", plural_text="%d items", context="cart")


def test_non_literal_plural_means_no_plural(make_call, registry: SignatureRegistry) -> None:
    candidate = extract_candidate(make_call("ngettext", "file", None), registry["ngettext"])

    assert candidate == Candidate("file", plural_text=None)


def test_missing_plural_means_no_plural(make_call, registry: SignatureRegistry) -> None:
    candidate = extract_candidate(make_call("ngettext", "file"), registry["ngettext"])

    assert candidate == Candidate("file")


def test_non_literal_context_means_default_context(
    make_call, registry: SignatureRegistry
) -> None:
    candidate = extract_candidate(make_call("pgettext", None, "Open"), registry["pgettext"])

    assert candidate == Candidate("Open", context="")


def test_extra_arguments_are_ignored(make_call, registry: SignatureRegistry) -> None:
    candidate = extract_candidate(make_call("gettext", "Hi", None, "x"), registry["gettext"])

    assert candidate == Candidate("Hi")
