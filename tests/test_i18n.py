import json

from tweetvid.i18n import I18n


def write_locale(directory, code, data):
    (directory / f"{code}.json").write_text(json.dumps(data), encoding="utf-8")


def test_lookup_falls_back_to_default_locale(tmp_path):
    write_locale(tmp_path, "en", {"error": {"timeout": "Too slow", "rate_limit": "Wait {seconds}s"}})
    write_locale(tmp_path, "ja", {"error": {"timeout": "遅すぎます"}})
    messages = I18n(locales_dir=str(tmp_path))

    assert messages.get("error.timeout", locale="ja") == "遅すぎます"
    assert messages.get("error.rate_limit", locale="ja", seconds=5) == "Wait 5s"
    assert messages.get("error.timeout", locale="fr") == "Too slow"
    assert messages.get("error.unknown") == "error.unknown"


def test_bad_placeholders_return_template(tmp_path):
    write_locale(tmp_path, "en", {"log": {"x": "Value {missing}"}})
    messages = I18n(locales_dir=str(tmp_path))

    assert messages.get("log.x", other=1) == "Value {missing}"


def test_broken_locale_file_is_skipped(tmp_path):
    (tmp_path / "en.json").write_text("{not json", encoding="utf-8")
    write_locale(tmp_path, "ja", {"a": "b"})
    messages = I18n(locales_dir=str(tmp_path))

    assert sorted(messages.catalogs) == ["ja"]
    assert messages.get("a", locale="ja") == "b"


def test_shipped_english_messages():
    messages = I18n()

    assert messages.get("error.rate_limit") == "Too many requests, please try again later."
    assert messages.get("response.server_running") == "Server is running"
