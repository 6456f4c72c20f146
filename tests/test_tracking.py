"""Tests for tracking-parameter classification."""

import pytest

from tidy_url.tracking import (
    KEEP_PARAMS,
    REMOVE_PARAMS,
    TrackingClassifier,
    default_classifier,
    is_tracking,
    load_tracking_classifier,
)


@pytest.mark.parametrize("name", sorted(KEEP_PARAMS))
def test_allow_list_is_never_tracking(name: str) -> None:
    """Test that allow-listed names win over patterns (e.g. `id` ends with 'id')."""
    assert not is_tracking(name)
    assert not is_tracking(name.upper())


@pytest.mark.parametrize("name", sorted(REMOVE_PARAMS))
def test_deny_list_is_tracking(name: str) -> None:
    assert is_tracking(name)


@pytest.mark.parametrize(
    "name",
    ["UTM_Source", "FBCLID", "Gclid"],
)
def test_lookup_is_case_insensitive(name: str) -> None:
    assert is_tracking(name)


@pytest.mark.parametrize(
    "name",
    [
        "_hjid",          # leading underscore
        "sessionid",      # ends with id
        "ad_click_ref",   # contains click
        "tracker",        # contains track
        "trackingcode",
        "referrer",       # referrer family
        "refer",
        "campaign_name",
        "src",
        "affiliate_code",
        "s_kwcid",        # Adobe Analytics prefix
        "s_v",
    ],
)
def test_patterns_match(name: str) -> None:
    assert is_tracking(name)


@pytest.mark.parametrize("name", ["color", "lang", "size", "v", "format", "srcset", "limit"])
def test_ordinary_parameters_are_kept(name: str) -> None:
    assert not is_tracking(name)


def test_patterns_are_over_inclusive() -> None:
    """`prefix` contains 'ref'; callers keep it through the allow-list."""
    assert is_tracking("prefix")
    assert not TrackingClassifier(keep=["Prefix"]).is_tracking("prefix")


def test_custom_remove_list() -> None:
    classifier = TrackingClassifier(remove=["Color"])

    assert classifier.is_tracking("color")
    assert not default_classifier.is_tracking("color")


def test_allow_list_beats_custom_remove_list() -> None:
    classifier = TrackingClassifier(remove=["page"])
    assert not classifier.is_tracking("page")


def test_custom_lists_extend_builtin_tables() -> None:
    classifier = TrackingClassifier(keep=["lang"], remove=["spm"])

    assert KEEP_PARAMS <= classifier.keep
    assert REMOVE_PARAMS <= classifier.remove
    assert isinstance(classifier.keep, frozenset)
    assert isinstance(classifier.remove, frozenset)


# =============================================================================
# YAML rules file
# =============================================================================


def test_load_tracking_classifier(tmp_path) -> None:
    path = tmp_path / "tracking.yaml"
    path.write_text("keep:\n  - ref\nremove:\n  - spm\n")

    classifier = load_tracking_classifier(str(path))

    assert not classifier.is_tracking("ref")
    assert classifier.is_tracking("spm")


def test_load_tracking_classifier_missing_file(tmp_path) -> None:
    classifier = load_tracking_classifier(str(tmp_path / "nope.yaml"))
    assert classifier is default_classifier


def test_load_tracking_classifier_empty_file(tmp_path) -> None:
    path = tmp_path / "tracking.yaml"
    path.write_text("")

    classifier = load_tracking_classifier(str(path))

    assert classifier.keep == KEEP_PARAMS
    assert classifier.remove == REMOVE_PARAMS
