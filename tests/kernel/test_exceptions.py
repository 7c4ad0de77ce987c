"""
Tests for jobsplit_kernel.exceptions.

Validates exception hierarchy, error codes, and structured attributes.
"""

import pytest

from jobsplit_kernel.exceptions import (
    InvalidChunkSizeError,
    InvalidSettingError,
    JobSplitError,
    SettingsError,
    SplitError,
)


# =============================================================================
# Exception hierarchy tests
# =============================================================================


class TestExceptionHierarchy:
    def test_base_code(self):
        assert JobSplitError.code == "JOBSPLIT_ERROR"

    def test_split_error_inherits(self):
        assert issubclass(SplitError, JobSplitError)
        assert SplitError.code == "SPLIT_ERROR"

    def test_invalid_chunk_size_inherits(self):
        assert issubclass(InvalidChunkSizeError, SplitError)

    def test_settings_error_inherits(self):
        assert issubclass(SettingsError, JobSplitError)
        assert SettingsError.code == "SETTINGS_ERROR"

    def test_invalid_setting_inherits(self):
        assert issubclass(InvalidSettingError, SettingsError)

    @pytest.mark.parametrize(
        "exc_cls",
        [JobSplitError, SplitError, InvalidChunkSizeError, SettingsError, InvalidSettingError],
    )
    def test_every_class_has_code(self, exc_cls):
        assert isinstance(exc_cls.code, str)
        assert exc_cls.code


# =============================================================================
# Exception construction tests
# =============================================================================


class TestInvalidChunkSizeError:
    def test_construction(self):
        exc = InvalidChunkSizeError(0)
        assert exc.size == 0
        assert "0" in str(exc)
        assert exc.code == "INVALID_CHUNK_SIZE"


class TestInvalidSettingError:
    def test_construction(self):
        exc = InvalidSettingError("queue", "", "must not be empty")
        assert exc.field == "queue"
        assert exc.value == ""
        assert exc.reason == "must not be empty"
        assert "queue" in str(exc)
        assert "must not be empty" in str(exc)
        assert exc.code == "INVALID_SETTING"

    def test_catchable_as_base(self):
        with pytest.raises(JobSplitError):
            raise InvalidSettingError("batch_size", -1, "must be >= 1")
