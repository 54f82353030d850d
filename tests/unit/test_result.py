"""Tests for the Result type."""

import pytest
from hypothesis import given, strategies as st

from src.assistant.result import Err, Ok


class TestOk:
    def test_is_ok(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_unwrap(self) -> None:
        assert Ok("hello").unwrap() == "hello"

    def test_map(self) -> None:
        assert Ok(5).map(lambda x: x * 2).unwrap() == 10

    @given(st.integers())
    def test_ok_preserves_value(self, value: int) -> None:
        assert Ok(value).unwrap() == value


class TestErr:
    def test_is_err(self) -> None:
        result = Err("something failed")
        assert result.is_err() is True
        assert result.is_ok() is False

    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="fail"):
            Err("fail").unwrap()

    def test_map_noop(self) -> None:
        calls = []
        mapped = Err("fail").map(lambda x: calls.append(x) or x)
        assert mapped.is_err()
        assert mapped.error == "fail"  # type: ignore[union-attr]
        assert calls == []

    @given(st.text(min_size=1))
    def test_err_preserves_error(self, error: str) -> None:
        with pytest.raises(ValueError):
            Err(error).unwrap()
