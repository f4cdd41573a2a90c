import pytest

from model.api import ObfuscateRequest
from model.job import Job, JobOptions, JobRequest, JobResult, ResultStats
from util.errors import InvalidTransitionError


def _job() -> Job:
    return Job(
        id="abc",
        token="secret-token",
        submitted_at=1,
        request=JobRequest(script="x"),
        base_url="http://h",
    )


def _result() -> JobResult:
    return JobResult(
        url="http://h/files/lua/t.lua",
        stats=ResultStats(original_size=1, obfuscated_size=2, ratio=2.0, time=0.1),
    )


class TestLifecycle:
    def test_happy_path_sets_each_timestamp_once(self) -> None:
        job = _job()

        job.mark_processing(10)
        job.mark_completed(_result(), 20)

        assert job.status == "completed"
        assert (job.submitted_at, job.started_at, job.completed_at) == (1, 10, 20)
        assert job.is_terminal

    def test_failure_path(self) -> None:
        job = _job()
        job.mark_processing(10)

        job.mark_failed("boom", 15)

        assert job.status == "failed"
        assert job.error == "boom"
        assert job.completed_at == 15

    def test_cannot_skip_processing(self) -> None:
        with pytest.raises(InvalidTransitionError):
            _job().mark_completed(_result(), 5)

    @pytest.mark.parametrize("finish", ["completed", "failed"])
    def test_terminal_states_are_final(self, finish) -> None:
        job = _job()
        job.mark_processing(10)
        if finish == "completed":
            job.mark_completed(_result(), 20)
        else:
            job.mark_failed("boom", 20)

        with pytest.raises(InvalidTransitionError):
            job.mark_processing(30)
        with pytest.raises(InvalidTransitionError):
            job.mark_failed("again", 30)
        assert job.status == finish
        assert job.completed_at == 20


class TestSerialization:
    def test_token_never_serialized(self) -> None:
        job = _job()

        assert "token" not in job.model_dump()
        assert "secret-token" not in job.model_dump_json()
        assert "secret-token" not in repr(job)


class TestRequestCoercion:
    @pytest.mark.parametrize("profile", [123, 1.5, True, ["speed"], {"p": 1}])
    def test_non_text_profile_becomes_default(self, profile) -> None:
        assert JobRequest(script="x", profile=profile).profile is None
        assert ObfuscateRequest.model_validate({"profile": profile}).profile is None

    def test_non_text_preset_is_dropped(self) -> None:
        assert JobOptions.model_validate({"presetName": 7}).preset is None

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (["vm", "junk_yard"], ["vm", "junk_yard"]),
            (("junk-yard",), ["junk_yard"]),
            ("vm", ["vm"]),
            ({"vm": True}, []),
            ([1, None, "watermark"], []),
        ],
    )
    def test_feature_flag_set_shapes(self, raw, expected) -> None:
        opts = JobOptions.model_validate({"featureFlags": raw})
        assert opts.feature_flags() == expected

    def test_toggles_follow_truthiness(self) -> None:
        opts = JobOptions.model_validate({"vm": 1, "junk_yard": 0})
        assert opts.feature_flags() == ["vm"]

    @pytest.mark.parametrize("options", ["fast", 3, ["vm"]])
    def test_non_object_options_are_dropped(self, options) -> None:
        req = ObfuscateRequest.model_validate({"script": "x", "options": options})
        assert req.options is None

    def test_non_text_script_counts_as_missing(self) -> None:
        assert ObfuscateRequest.model_validate({"script": 42}).script is None
