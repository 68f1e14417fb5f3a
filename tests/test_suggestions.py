"""
Correction review tests - identity keys, active list filtering and at-most-once application.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from priority_review.core.errors import DuplicateApplyError, MutationFailedError
from priority_review.core.suggestions import (
    CorrectionSuggestion,
    SuggestionKey,
    SuggestionState,
    SuggestionTracker,
    ValidationErrorRef,
    find_by_key,
)


def make_suggestion(row=3, column="Duration", entity_type="task", reasoning="Duration must be positive",
                    corrected_value=1, action="auto-fix", confidence=0.9):
    return CorrectionSuggestion(
        error=ValidationErrorRef(row=row, column=column, entity_type=entity_type, message="invalid value"),
        suggestion=f"Set {column} to {corrected_value}",
        reasoning=reasoning,
        confidence=confidence,
        action=action,
        corrected_value=corrected_value
    )


@pytest.fixture
def tracker():
    """Create a fresh tracker for each test."""
    return SuggestionTracker()


class TestSuggestionKey:
    """Test the composite identity key."""

    def test_key_ignores_content(self):
        a = make_suggestion(reasoning="first")
        b = make_suggestion(reasoning="second", corrected_value=5, confidence=0.2)
        assert a.key == b.key
        assert hash(a.key) == hash(b.key)

    def test_key_differs_per_field(self):
        base = make_suggestion()
        assert make_suggestion(row=4).key != base.key
        assert make_suggestion(column="TaskName").key != base.key
        assert make_suggestion(entity_type="worker").key != base.key

    def test_encode(self):
        assert SuggestionKey(3, "Duration", "task").encode() == "3-Duration-task"
        assert str(SuggestionKey(0, "Skills", "worker")) == "0-Skills-worker"

    def test_usable_in_sets(self):
        keys = {make_suggestion().key, make_suggestion(reasoning="other").key}
        assert keys == {SuggestionKey(3, "Duration", "task")}


class TestCorrectionSuggestion:
    """Test suggestion value validation and serialization."""

    def test_invalid_confidence(self):
        with pytest.raises(ValueError):
            make_suggestion(confidence=1.5)

    def test_invalid_action(self):
        with pytest.raises(ValueError):
            make_suggestion(action="ignore")

    def test_invalid_entity_type(self):
        with pytest.raises(ValueError):
            ValidationErrorRef(row=0, column="x", entity_type="system")

    def test_error_type_must_be_known(self):
        for error_type in ("error", "warning", "critical"):
            assert ValidationErrorRef(row=0, column="x", entity_type="task", type=error_type).type == error_type
        with pytest.raises(ValueError):
            ValidationErrorRef(row=0, column="x", entity_type="task", type="info")

    def test_is_auto_fix(self):
        assert make_suggestion(action="auto-fix").is_auto_fix
        assert not make_suggestion(action="review-needed").is_auto_fix

    def test_from_dict_accepts_camel_case(self):
        suggestion = CorrectionSuggestion.from_dict({
            "error": {"row": 2, "column": "Skills", "entityType": "worker", "message": "empty"},
            "suggestion": "Add skills",
            "correctedValue": ["welding", "painting"],
            "reasoning": "Workers need at least one skill",
            "confidence": 0.7,
            "action": "review-needed"
        })
        assert suggestion.key == SuggestionKey(2, "Skills", "worker")
        assert suggestion.corrected_value == ["welding", "painting"]

    def test_to_dict_round_trip(self):
        original = make_suggestion(corrected_value=[1, 2])
        assert CorrectionSuggestion.from_dict(original.to_dict()) == original


class TestActiveSuggestions:
    """Test the active list filter."""

    def test_all_pending_returned_in_order(self, tracker):
        suggestions = [make_suggestion(row=i) for i in (5, 1, 3)]
        assert tracker.active_suggestions(suggestions) == suggestions

    @pytest.mark.asyncio
    async def test_applied_key_excluded_even_if_content_differs(self, tracker):
        first = make_suggestion(reasoning="Duration must be positive")
        twin = make_suggestion(reasoning="Duration looks like a typo", corrected_value=2)
        other = make_suggestion(row=4)

        await tracker.apply_suggestion(first)

        assert tracker.active_suggestions([first, other, twin]) == [other]

    def test_dismissed_kept_by_default(self, tracker):
        s = make_suggestion()
        tracker.dismiss_suggestion(s)
        assert tracker.active_suggestions([s]) == [s]

    def test_dismissed_excluded_on_request(self, tracker):
        s = make_suggestion()
        other = make_suggestion(row=9)
        tracker.dismiss_suggestion(s)
        assert tracker.active_suggestions([s, other], include_dismissed=False) == [other]


class TestApplySuggestion:
    """Test at-most-once application."""

    @pytest.mark.asyncio
    async def test_apply_signals_mutator_once(self, tracker):
        mutator = MagicMock(return_value=None)
        s = make_suggestion()

        assert await tracker.apply_suggestion(s, mutator) is True
        assert await tracker.apply_suggestion(s, mutator) is False

        mutator.assert_called_once_with(s)
        assert tracker.state_of(s.key) == SuggestionState.APPLIED
        assert tracker.is_resolved(s.key)

    @pytest.mark.asyncio
    async def test_async_mutator_awaited(self, tracker):
        mutator = AsyncMock()
        s = make_suggestion()

        assert await tracker.apply_suggestion(s, mutator) is True

        mutator.assert_awaited_once_with(s)

    @pytest.mark.asyncio
    async def test_twin_suggestion_not_reapplied(self, tracker):
        mutator = MagicMock(return_value=None)
        await tracker.apply_suggestion(make_suggestion(reasoning="a"), mutator)

        committed = await tracker.apply_suggestion(make_suggestion(reasoning="b"), mutator)

        assert committed is False
        assert mutator.call_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_double_apply_signals_once(self, tracker):
        calls = []
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_mutator(suggestion):
            calls.append(suggestion)
            started.set()
            await release.wait()

        s = make_suggestion()
        first = asyncio.create_task(tracker.apply_suggestion(s, slow_mutator))
        await started.wait()

        assert tracker.state_of(s.key) == SuggestionState.APPLYING
        assert await tracker.apply_suggestion(s, slow_mutator) is False
        assert tracker.active_suggestions([s]) == []

        release.set()
        assert await first is True
        assert len(calls) == 1
        assert tracker.state_of(s.key) == SuggestionState.APPLIED

    @pytest.mark.asyncio
    async def test_gathered_duplicates_signal_once(self, tracker):
        mutator = AsyncMock()
        s = make_suggestion()

        results = await asyncio.gather(*(tracker.apply_suggestion(s, mutator) for _ in range(5)))

        assert sorted(results) == [False, False, False, False, True]
        assert mutator.await_count == 1

    @pytest.mark.asyncio
    async def test_mutation_failure_keeps_key_applied(self, tracker):
        mutator = MagicMock(side_effect=RuntimeError("row locked"))
        s = make_suggestion()

        with pytest.raises(MutationFailedError) as exc_info:
            await tracker.apply_suggestion(s, mutator)

        assert exc_info.value.key == s.key
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert tracker.state_of(s.key) == SuggestionState.APPLIED
        assert s.key in tracker.failed_keys()

        assert await tracker.apply_suggestion(s, mutator) is False
        assert mutator.call_count == 1

    @pytest.mark.asyncio
    async def test_dismissed_key_not_applied(self, tracker):
        mutator = MagicMock(return_value=None)
        s = make_suggestion()
        tracker.dismiss_suggestion(s)

        assert await tracker.apply_suggestion(s, mutator) is False
        mutator.assert_not_called()

    @pytest.mark.asyncio
    async def test_apply_without_mutator(self, tracker):
        s = make_suggestion()
        assert await tracker.apply_suggestion(s) is True
        assert tracker.applied_keys() == {s.key}

    @pytest.mark.asyncio
    async def test_require_apply_raises_on_duplicate(self, tracker):
        s = make_suggestion()
        await tracker.require_apply(s)

        with pytest.raises(DuplicateApplyError):
            await tracker.require_apply(s)


class TestDismissSuggestion:
    """Test dismissal."""

    def test_dismiss_pending(self, tracker):
        s = make_suggestion()
        assert tracker.dismiss_suggestion(s) is True
        assert tracker.state_of(s.key) == SuggestionState.DISMISSED
        assert tracker.is_resolved(s.key)
        assert tracker.dismissed_keys() == {s.key}

    @pytest.mark.asyncio
    async def test_dismiss_applied_is_noop(self, tracker):
        s = make_suggestion()
        await tracker.apply_suggestion(s)

        assert tracker.dismiss_suggestion(s) is False
        assert tracker.state_of(s.key) == SuggestionState.APPLIED
        assert tracker.dismissed_keys() == set()

    def test_unseen_key_is_pending(self, tracker):
        key = SuggestionKey(1, "ClientName", "client")
        assert tracker.state_of(key) == SuggestionState.PENDING
        assert not tracker.is_resolved(key)


class TestRetrySuggestion:
    """Test the explicit retry path for failed mutations."""

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, tracker):
        s = make_suggestion()
        with pytest.raises(MutationFailedError):
            await tracker.apply_suggestion(s, MagicMock(side_effect=RuntimeError("offline")))

        mutator = MagicMock(return_value=None)
        assert await tracker.retry_suggestion(s, mutator) is True
        mutator.assert_called_once_with(s)
        assert tracker.failed_keys() == {}

        # A successful retry clears the failure, so it cannot be re-driven
        assert await tracker.retry_suggestion(s, mutator) is False
        assert mutator.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_not_allowed_after_success(self, tracker):
        mutator = MagicMock(return_value=None)
        s = make_suggestion()
        await tracker.apply_suggestion(s, mutator)

        assert await tracker.retry_suggestion(s, mutator) is False
        assert mutator.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_unknown_key(self, tracker):
        assert await tracker.retry_suggestion(make_suggestion(), MagicMock(return_value=None)) is False

    @pytest.mark.asyncio
    async def test_retry_failing_again_keeps_failure(self, tracker):
        s = make_suggestion()
        failing = MagicMock(side_effect=RuntimeError("still offline"))
        with pytest.raises(MutationFailedError):
            await tracker.apply_suggestion(s, failing)

        with pytest.raises(MutationFailedError):
            await tracker.retry_suggestion(s, failing)

        assert tracker.failed_keys() == {s.key: "still offline"}
        assert tracker.state_of(s.key) == SuggestionState.APPLIED


def test_find_by_key():
    suggestions = [make_suggestion(row=1), make_suggestion(row=3, reasoning="x"), make_suggestion(row=3)]
    assert find_by_key(suggestions, SuggestionKey(3, "Duration", "task")) is suggestions[1]
    assert find_by_key(suggestions, SuggestionKey(7, "Duration", "task")) is None
