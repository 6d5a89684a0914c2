from __future__ import annotations

from notfound_suggestions.domain.job_keys import (
    JOB_KEY_PREFIX,
    derive_job_key,
    normalize_url_for_cache_key,
)


def test_derive_job_key_is_deterministic() -> None:
    first = derive_job_key("/old-page/")
    second = derive_job_key("/old-page/")

    assert first == second
    assert first.startswith(JOB_KEY_PREFIX)
    assert len(first) == len(JOB_KEY_PREFIX) + 64


def test_derive_job_key_differs_per_url() -> None:
    assert derive_job_key("/old-page/") != derive_job_key("/other-page/")


def test_query_string_and_whitespace_do_not_split_jobs() -> None:
    assert normalize_url_for_cache_key("  /old-page/?utm_source=mail ") == "/old-page/"


def test_percent_encoded_url_normalizes_to_decoded_url() -> None:
    assert normalize_url_for_cache_key("/caf%C3%A9/") == "/café/"


def test_normalize_decodes_one_level_only() -> None:
    assert normalize_url_for_cache_key("/sale%25252541") == "/sale%252541"


def test_derive_job_key_hashes_input_as_given() -> None:
    normalized = normalize_url_for_cache_key("/sale%25252541")

    assert derive_job_key(normalized) != derive_job_key(normalize_url_for_cache_key(normalized))
    assert derive_job_key("/old-page/?ref=1") != derive_job_key("/old-page/")


def test_normalize_strips_control_characters_and_invalid_utf8() -> None:
    assert normalize_url_for_cache_key("/bad%FFpath\x00/") == "/badpath/"


def test_normalize_empty_url() -> None:
    assert normalize_url_for_cache_key("") == ""
    assert derive_job_key("").startswith(JOB_KEY_PREFIX)
