"""Tests for configuration models and default filling."""

import pytest
from pydantic import ValidationError

from locdog.config.models import TargetConfig, WatchdogConfig


@pytest.fixture
def watchdog_config():
    return WatchdogConfig(
        default_interval=10,
        default_threshold=60,
        default_timeout=5,
        default_alert_cmd=["notify", "alert"],
        targets=[
            {"name": "web", "watch_cmd": ["curl", "-f", "http://localhost"]},
            {
                "name": "db",
                "watch_cmd": ["pg_isready"],
                "interval": 2,
                "threshold": 15,
                "timeout": 1,
                "alert_cmd": ["page", "db"],
                "nodata_cmd": ["page", "db-silent"],
            },
        ],
    )


class TestDefaultFilling:
    """Test suite for TargetConfig.with_defaults."""

    def test_unset_fields_take_defaults(self, watchdog_config):
        web = watchdog_config.targets[0].with_defaults(watchdog_config)

        assert web.interval == 10
        assert web.threshold == 60
        assert web.timeout == 5
        assert web.alert_cmd == ["notify", "alert"]
        assert web.nodata_cmd is None

    def test_explicit_fields_are_kept(self, watchdog_config):
        db = watchdog_config.targets[1].with_defaults(watchdog_config)

        assert db.interval == 2
        assert db.threshold == 15
        assert db.timeout == 1
        assert db.alert_cmd == ["page", "db"]
        assert db.nodata_cmd == ["page", "db-silent"]

    def test_filling_is_idempotent(self, watchdog_config):
        for target in watchdog_config.targets:
            once = target.with_defaults(watchdog_config)
            twice = once.with_defaults(watchdog_config)
            assert twice == once

    def test_filling_does_not_mutate_original(self, watchdog_config):
        original = watchdog_config.targets[0]
        original.with_defaults(watchdog_config)

        assert original.interval is None
        assert original.alert_cmd is None

    def test_default_nodata_cmd(self):
        config = WatchdogConfig(
            default_nodata_cmd=["logger", "silent"],
            targets=[{"name": "a", "watch_cmd": ["true"]}],
        )

        assert config.effective_targets()[0].nodata_cmd == ["logger", "silent"]

    def test_empty_alert_cmd_means_unset(self, watchdog_config):
        target = TargetConfig(name="x", watch_cmd=["true"], alert_cmd=[])

        assert target.alert_cmd is None
        assert target.with_defaults(watchdog_config).alert_cmd == ["notify", "alert"]

    @pytest.mark.parametrize("field", ["interval", "threshold", "timeout"])
    def test_zero_duration_means_unset(self, watchdog_config, field):
        target = TargetConfig(name="x", watch_cmd=["true"], **{field: 0})

        assert getattr(target, field) is None
        filled = target.with_defaults(watchdog_config)
        assert getattr(filled, field) == getattr(watchdog_config, f"default_{field}")

    def test_zero_durations_load_from_document(self):
        config = WatchdogConfig(
            default_interval=10,
            default_threshold=60,
            targets=[{"name": "a", "watch_cmd": ["true"], "interval": 0, "threshold": 0}],
        )
        target = config.effective_targets()[0]

        assert target.interval == 10
        assert target.threshold == 60

    def test_effective_targets_preserves_order(self, watchdog_config):
        names = [t.name for t in watchdog_config.effective_targets()]
        assert names == ["web", "db"]

    def test_builtin_defaults(self):
        config = WatchdogConfig(targets=[{"name": "a", "watch_cmd": ["true"]}])
        target = config.effective_targets()[0]

        assert target.interval == 60.0
        assert target.threshold == 300.0
        assert target.timeout is None
        assert target.alert_cmd is None


class TestValidation:
    """Test suite for configuration validation."""

    def test_duplicate_target_names_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate target name"):
            WatchdogConfig(targets=[
                {"name": "a", "watch_cmd": ["true"]},
                {"name": "a", "watch_cmd": ["false"]},
            ])

    def test_empty_watch_cmd_rejected(self):
        with pytest.raises(ValidationError):
            TargetConfig(name="a", watch_cmd=[])

    def test_blank_executable_rejected(self):
        with pytest.raises(ValidationError, match="executable"):
            TargetConfig(name="a", watch_cmd=["  ", "arg"])

    def test_missing_watch_cmd_rejected(self):
        with pytest.raises(ValidationError):
            TargetConfig(name="a")

    @pytest.mark.parametrize("field", ["interval", "threshold", "timeout"])
    def test_negative_durations_rejected(self, field):
        with pytest.raises(ValidationError):
            TargetConfig(name="a", watch_cmd=["true"], **{field: -1})

    def test_non_positive_default_rejected(self):
        with pytest.raises(ValidationError):
            WatchdogConfig(default_threshold=-1)

    def test_fractional_durations_allowed(self):
        target = TargetConfig(name="a", watch_cmd=["true"], interval=0.5)
        assert target.interval == 0.5
