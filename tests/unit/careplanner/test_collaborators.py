"""
Tests for collaborator helpers in `careplanner/services/collaborators.py`.

Covers:
- Result construction, success and failure access
- OCR line joining
"""

from __future__ import annotations

import pytest

from careplanner.services.collaborators import ImageDecodeError, Result, join_recognized_lines


class TestResult:
    def test_ok(self) -> None:
        result: Result[str, Exception] = Result.ok("Amoxicilina")

        assert result.is_err() is False
        assert result.unwrap() == "Amoxicilina"
        with pytest.raises(ValueError, match="successful result"):
            result.unwrap_err()

    def test_err(self) -> None:
        error = ImageDecodeError("not an image")
        result: Result[str, Exception] = Result.err(error)

        assert result.is_err() is True
        assert result.unwrap_err() is error
        with pytest.raises(ImageDecodeError, match="not an image"):
            result.unwrap()

    def test_empty_text_is_a_value(self) -> None:
        assert Result.ok("").unwrap() == ""

    @pytest.mark.parametrize(
        "kwargs", [{}, {"value": "texto", "error": ImageDecodeError("both")}]
    )
    def test_exactly_one_side(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValueError, match="exactly one"):
            Result(**kwargs)  # type: ignore[arg-type]


def test_join_recognized_lines() -> None:
    assert join_recognized_lines(["Amoxicilina", "250 mg"]) == "Amoxicilina\n250 mg"
    assert join_recognized_lines([]) == ""
