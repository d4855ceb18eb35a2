"""Tests for the Sampler class."""

import logging
import threading

from conftest import GIB, FakeMetricsSource, QueueChannel

from sysgauge.channel import MetricsState
from sysgauge.dashboard import Dashboard
from sysgauge.metrics import PsutilMetricsSource
from sysgauge.models import UNKNOWN, MemoryReading, Sample
from sysgauge.sampler import Sampler


class TestSampleOnce:
    """Tests for assembling a single Sample."""

    def test_sample_fields(self, fake_source, queue_channel):
        """Test a sample carries the source's readings."""
        sampler = Sampler(fake_source, queue_channel)

        sample = sampler.sample_once()

        assert sample.cpu_percent == 50.0
        assert sample.memory_total == 16 * GIB
        assert sample.memory_used == 4 * GIB
        assert sample.memory_free == 8 * GIB
        assert sample.memory_available == 12 * GIB
        assert sample.platform == "Linux 6.1.0"
        assert sample.cpu_model == "Fake CPU @ 3.00GHz"

    def test_sequence_increases(self, fake_source, queue_channel):
        """Test each sample gets the next sequence number."""
        sampler = Sampler(fake_source, queue_channel)

        sequences = [sampler.sample_once().sequence for _ in range(3)]

        assert sequences == [1, 2, 3]
        assert sampler.samples_produced == 3

    def test_failed_reads_are_substituted(self, queue_channel):
        """Test every failing field falls back to 0 / Unknown."""
        source = FakeMetricsSource(
            failing={
                "refresh_cpu",
                "refresh_memory",
                "cpu_usage",
                "memory",
                "cpu_brand",
                "os_name",
                "os_version",
            }
        )
        sampler = Sampler(source, queue_channel)

        sample = sampler.sample_once()

        assert sample.cpu_percent == 0.0
        assert sample.memory == MemoryReading()
        assert sample.platform == f"{UNKNOWN} {UNKNOWN}"
        assert sample.cpu_model == UNKNOWN

    def test_missing_data_is_substituted(self, queue_channel):
        """Test None readings are treated like failures."""
        source = FakeMetricsSource(cpu_readings=(None,), memory=None, brand=None)
        sampler = Sampler(source, queue_channel)

        sample = sampler.sample_once()

        assert sample.cpu_percent == 0.0
        assert sample.memory_total == 0
        assert sample.cpu_model == UNKNOWN

    def test_bad_memory_counters_are_cleaned(self, queue_channel):
        """Test None, negative and NaN memory counters become 0 and still render."""
        reading = MemoryReading(total=None, used=-GIB, free=float("nan"), available="n/a")
        source = FakeMetricsSource(memory=reading)
        sampler = Sampler(source, queue_channel)

        sample = sampler.sample_once()

        assert sample.memory == MemoryReading()
        dashboard = Dashboard()
        dashboard.apply(sample)
        assert dashboard.memory_gauge.ratio == 0.0
        dashboard.memory_gauge.render(20.0, 20.0)

    def test_memory_counters_truncated_to_int(self, queue_channel):
        """Test float counters from a source are stored as whole bytes."""
        reading = MemoryReading(total=16.0 * GIB, used=4.5, free=8.0 * GIB, available=12.0 * GIB)
        sampler = Sampler(FakeMetricsSource(memory=reading), queue_channel)

        sample = sampler.sample_once()

        assert sample.memory_total == 16 * GIB
        assert sample.memory_used == 4
        assert isinstance(sample.memory_used, int)

    def test_substitution_is_logged(self, queue_channel, caplog):
        """Test a failing metric is logged at debug level."""
        source = FakeMetricsSource(failing={"memory"})
        sampler = Sampler(source, queue_channel)

        with caplog.at_level(logging.DEBUG, logger="sysgauge.sampler"):
            sampler.sample_once()

        assert "memory unavailable" in caplog.text

    def test_cpu_percent_clamped(self, queue_channel):
        """Test out-of-range CPU readings are clamped into [0, 100]."""
        source = FakeMetricsSource(cpu_readings=(150.0, -5.0, float("nan")))
        sampler = Sampler(source, queue_channel)

        assert sampler.sample_once().cpu_percent == 100.0
        assert sampler.sample_once().cpu_percent == 0.0
        assert sampler.sample_once().cpu_percent == 0.0

    def test_static_info_resolved_once(self, fake_source, queue_channel):
        """Test platform strings are cached after a successful lookup."""
        sampler = Sampler(fake_source, queue_channel)

        for _ in range(3):
            sampler.sample_once()

        assert fake_source.calls["cpu_brand"] == 1
        assert fake_source.calls["os_name"] == 1
        assert sampler.static_info.cpu_model == "Fake CPU @ 3.00GHz"

    def test_static_info_retried_while_unknown(self, queue_channel):
        """Test an unknown CPU model is looked up again on the next tick."""
        source = FakeMetricsSource(brand=None)
        sampler = Sampler(source, queue_channel)

        sampler.sample_once()
        source.brand = "Late CPU"
        sample = sampler.sample_once()

        assert sample.cpu_model == "Late CPU"


class TestSampler:
    """Tests for the Sampler thread."""

    def test_sampler_creation(self, fake_source, queue_channel):
        """Test Sampler can be instantiated."""
        sampler = Sampler(fake_source, queue_channel)

        assert sampler.interval == 1.0
        assert not sampler.is_running
        assert not sampler._warmed_up

    def test_interval_minimum(self, fake_source, queue_channel):
        """Test interval has a minimum value."""
        sampler = Sampler(fake_source, queue_channel)

        sampler.interval = 0.01
        assert sampler.interval >= 0.1

    def test_sampler_start_stop(self, fake_source, queue_channel):
        """Test Sampler can be started and stopped."""
        sampler = Sampler(fake_source, queue_channel, interval=0.1, warmup=0.01)

        sampler.start()
        assert sampler.is_running

        sampler.stop()
        assert not sampler.is_running

    def test_sampler_start_idempotent(self, fake_source, queue_channel):
        """Test starting an already running sampler is safe."""
        sampler = Sampler(fake_source, queue_channel, interval=0.1, warmup=0.01)

        sampler.start()
        thread1 = sampler._thread
        sampler.start()  # Should not create a new thread
        thread2 = sampler._thread

        assert thread1 is thread2
        sampler.stop()

    def test_daemon_thread(self, fake_source, queue_channel):
        """Test sampler thread is a daemon thread."""
        sampler = Sampler(fake_source, queue_channel, interval=0.1, warmup=0.01)

        sampler.start()
        try:
            assert sampler._thread is not None
            assert sampler._thread.daemon is True
            assert sampler._thread.name == "Sampler"
        finally:
            sampler.stop()

    def test_warm_up_discards_first_reading(self, queue_channel):
        """Test the first delivered sample is never the raw first CPU read."""
        source = FakeMetricsSource(cpu_readings=(99.0, 10.0, 20.0))
        sampler = Sampler(source, queue_channel, interval=0.1, warmup=0.01)

        sampler.start()
        try:
            first = queue_channel.queue.get(timeout=2.0)
            second = queue_channel.queue.get(timeout=2.0)
        finally:
            sampler.stop()

        assert sampler._warmed_up
        assert first.cpu_percent == 10.0
        assert second.cpu_percent == 20.0
        assert first.sequence == 1

    def test_warm_up_waits_before_first_sample(self, fake_source):
        """Test nothing is delivered during the warm-up delay."""
        state = MetricsState()
        sampler = Sampler(fake_source, state, interval=0.1, warmup=5.0)

        sampler.start()
        try:
            threading.Event().wait(0.2)
            assert state.read() is None
        finally:
            sampler.stop()

    def test_restart_keeps_cpu_baseline(self, fake_source, queue_channel):
        """Test a restarted sampler delivers without warming up again."""
        sampler = Sampler(fake_source, queue_channel, interval=0.1, warmup=0.01)
        sampler.start()
        queue_channel.queue.get(timeout=2.0)
        sampler.stop()

        sampler._warmup = 5.0
        sampler.start()
        try:
            sample = queue_channel.queue.get(timeout=2.0)
        finally:
            sampler.stop()

        assert sample.sequence > 1

    def test_interrupted_warm_up_is_not_counted(self, fake_source):
        """Test stopping during the warm-up leaves the sampler cold."""
        sampler = Sampler(fake_source, MetricsState(), interval=0.1, warmup=5.0)

        sampler.start()
        threading.Event().wait(0.1)
        sampler.stop()

        assert not sampler._warmed_up

    def test_sampler_delivers_repeatedly(self, fake_source, queue_channel):
        """Test the loop keeps delivering samples in production order."""
        sampler = Sampler(fake_source, queue_channel, interval=0.05, warmup=0.01)

        sampler.start()
        try:
            samples = [queue_channel.queue.get(timeout=2.0) for _ in range(3)]
        finally:
            sampler.stop()

        assert [s.sequence for s in samples] == [1, 2, 3]

    def test_sampler_survives_failing_channel(self, fake_source, caplog):
        """Test an exception from the channel does not stop the loop."""
        delivered = []

        class FlakyChannel:
            def deliver(self, sample: Sample) -> bool:
                delivered.append(sample)
                if len(delivered) == 1:
                    raise RuntimeError("boom")
                return True

        sampler = Sampler(fake_source, FlakyChannel(), interval=0.05, warmup=0.01)

        with caplog.at_level(logging.ERROR, logger="sysgauge.sampler"):
            sampler.start()
            try:
                for _ in range(40):
                    if len(delivered) >= 3:
                        break
                    threading.Event().wait(0.05)
            finally:
                sampler.stop()

        assert len(delivered) >= 3
        assert "Sampler tick failed" in caplog.text

    def test_sampler_with_psutil(self, queue_channel):
        """Test the sampler collects real data through psutil."""
        sampler = Sampler(PsutilMetricsSource(), queue_channel, interval=0.1)

        sampler.start()
        try:
            sample = queue_channel.queue.get(timeout=3.0)
            assert isinstance(sample, Sample)
            assert 0.0 <= sample.cpu_percent <= 100.0
            assert sample.memory_total > 0
            assert isinstance(sample.platform, str)
        finally:
            sampler.stop()
