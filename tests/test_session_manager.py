import os

from simulation.session_manager import SessionManager


def test_end_to_end_all_succeed(fast_config):
    result = SessionManager(fast_config(nodes=50, workers=4), write_reports=False).run()
    stats = result.stats
    assert len(result.records) == 50
    assert sorted(m.node_index for m in result.records) == list(range(50))
    assert stats.completed_count == 50
    assert stats.drop_count == 0
    assert stats.success_pct == 100.0
    assert all(m.success for m in result.records)
    assert result.workers == 4


def test_end_to_end_all_dropped(fast_config):
    result = SessionManager(fast_config(nodes=50, workers=4, fail_percent=100), write_reports=False).run()
    stats = result.stats
    assert len(result.records) == 50
    assert all(m.dropped and not m.success for m in result.records)
    assert stats.drop_count == 50
    assert stats.success_pct == 0.0
    assert stats.drop_pct == 100.0
    assert (stats.avg_us, stats.min_us, stats.max_us, stats.median_us) == (0.0, 0.0, 0.0, 0.0)


def test_full_tamper_never_succeeds(fast_config):
    result = SessionManager(fast_config(nodes=40, workers=3, tamper_percent=100), write_reports=False).run()
    assert result.stats.success_count == 0
    assert result.stats.drop_count == 0


def test_dropped_never_successful_under_mixed_conditions(fast_config):
    result = SessionManager(fast_config(nodes=60, workers=5, fail_percent=30, tamper_percent=30),
                            write_reports=False).run()
    assert len(result.records) == 60
    assert not any(m.dropped and m.success for m in result.records)
    stats = result.stats
    assert stats.success_count + stats.drop_count <= 60


def test_config_is_normalized(fast_config):
    sm = SessionManager(fast_config(nodes=3, workers=0, tamper_percent=250, fail_percent=-4), write_reports=False)
    assert sm.config.workers == 1
    assert sm.config.tamper_percent == 100.0
    assert sm.config.fail_percent == 0.0


def test_reports_are_written(fast_config):
    cfg = fast_config(nodes=5, workers=2)
    result = SessionManager(cfg).run()
    assert result.written == [cfg.out_file, cfg.summary_file]
    assert os.path.exists(cfg.out_file)
    assert os.path.exists(cfg.summary_file)


def test_csv_can_be_disabled(fast_config):
    cfg = fast_config(nodes=5, workers=2)
    result = SessionManager(cfg, write_csv=False).run()
    assert result.written == [cfg.summary_file]
    assert not os.path.exists(cfg.out_file)
