"""Unit tests for threshold alerting."""

from hostwatch.core.config import AlertConfig
from hostwatch.engine.alerts import ThresholdAlertEvaluator
from tests.conftest import make_stats


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestThresholdAlertEvaluator:
    def test_below_thresholds(self):
        evaluator = ThresholdAlertEvaluator()
        assert evaluator.check(make_stats(cpu=90.0, ram=95.0)) == []
        assert evaluator.recent_alerts() == []

    def test_cpu_alert(self):
        evaluator = ThresholdAlertEvaluator()
        [record] = evaluator.check(make_stats(cpu=97.3))
        assert record.kind == "CRITICAL_CPU"
        assert record.severity == "WARNING"
        assert "97.3" in record.message

    def test_ram_alert_message(self):
        evaluator = ThresholdAlertEvaluator()
        [record] = evaluator.check(make_stats(ram=96.0, mem_used_gb=15.4, mem_total_gb=16.0))
        assert record.kind == "CRITICAL_RAM"
        assert "15.4 GB / 16.0 GB" in record.message

    def test_cooldown_suppresses_repeats(self):
        clock = FakeClock()
        evaluator = ThresholdAlertEvaluator(AlertConfig(cooldown_seconds=600.0), clock=clock)
        hot = make_stats(cpu=99.0)

        assert len(evaluator.check(hot)) == 1
        clock.now += 599.0
        assert evaluator.check(hot) == []
        clock.now += 1.0
        assert len(evaluator.check(hot)) == 1
        assert len(evaluator.recent_alerts()) == 2

    def test_cooldown_is_per_kind(self):
        evaluator = ThresholdAlertEvaluator(clock=FakeClock())
        evaluator.check(make_stats(cpu=99.0))
        [record] = evaluator.check(make_stats(cpu=99.0, ram=99.0))
        assert record.kind == "CRITICAL_RAM"

    def test_set_thresholds(self):
        evaluator = ThresholdAlertEvaluator()
        evaluator.set_thresholds(cpu_percent=50.0)
        assert evaluator.thresholds.cpu_percent == 50.0
        assert evaluator.thresholds.ram_percent == 95.0
        assert len(evaluator.check(make_stats(cpu=60.0))) == 1

    def test_on_alert_callback(self):
        seen = []
        evaluator = ThresholdAlertEvaluator(on_alert=seen.append)
        evaluator.check(make_stats(cpu=95.0))
        assert [record.kind for record in seen] == ["CRITICAL_CPU"]
