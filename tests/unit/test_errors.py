from __future__ import annotations

from lib_tree_config.domain.errors import (
    ChangesNotAllowed,
    ConfigError,
    InvalidFormat,
    NotFound,
    UnsupportedFormat,
)


def test_error_hierarchy() -> None:
    assert issubclass(ChangesNotAllowed, ConfigError)
    assert issubclass(UnsupportedFormat, ConfigError)
    assert issubclass(InvalidFormat, ConfigError)
    assert issubclass(NotFound, ConfigError)
    for exception in (ChangesNotAllowed(), UnsupportedFormat("x"), InvalidFormat(""), NotFound("")):
        assert isinstance(exception, ConfigError)


def test_changes_not_allowed_message() -> None:
    assert str(ChangesNotAllowed()) == "Real-time configuration changes are not allowed."


def test_unsupported_format_names_the_token() -> None:
    exc = UnsupportedFormat("bad-ext")
    assert exc.format == "bad-ext"
    assert "bad-ext" in str(exc)
