import logging
import os

import pytest

import generate_dataset
import run_sm


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


def base_args(tmp_path):
    return ["--node-jitter", "0", "--net-ta-node", "0", "0", "--net-node-mw", "0", "0",
            "--db-delay", "0", "0", "--out", str(tmp_path / "perf.csv"),
            "--summary", str(tmp_path / "final.txt"), "--log-file", str(tmp_path / "sim.log")]


def test_parser_reads_original_flags():
    args = run_sm.build_parser().parse_args(
        ["--nodes", "200", "--workers", "4", "--tamper-percent", "1", "--payload-bytes", "512",
         "--node-jitter", "100", "--net-ta-node", "10", "50", "--net-node-mw", "10", "50",
         "--db-delay", "20", "60", "--fail-percent", "3", "--out", "results.csv"])
    cfg = run_sm.config_from_args(args)
    assert cfg.nodes == 200
    assert cfg.workers == 4
    assert cfg.tamper_percent == 1.0
    assert cfg.payload_bytes == 512
    assert cfg.node_jitter_ms == 100
    assert cfg.net_ta_node == (10, 50)
    assert cfg.net_node_mw == (10, 50)
    assert cfg.db_delay == (20, 60)
    assert cfg.fail_percent == 3.0
    assert cfg.out_file == "results.csv"


@pytest.mark.parametrize("argv", [["--bogus"], ["--nodes"], ["--net-ta-node", "5"], ["--workers", "x"]])
def test_bad_arguments_exit_with_usage(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        run_sm.main(argv)
    assert exc.value.code == 2
    assert "usage" in capsys.readouterr().err


def test_main_runs_and_writes_reports(tmp_path, capsys):
    rc = run_sm.main(["--nodes", "12", "--workers", "3"] + base_args(tmp_path))
    assert rc == 0
    out = capsys.readouterr().out
    assert "Success: 100.00%" in out
    assert "Dropped: 0.00%" in out
    assert os.path.exists(tmp_path / "perf.csv")
    assert os.path.exists(tmp_path / "final.txt")
    assert os.path.exists(tmp_path / "sim.log")


def test_no_csv_flag(tmp_path):
    run_sm.main(["--nodes", "4", "--no-csv"] + base_args(tmp_path))
    assert not os.path.exists(tmp_path / "perf.csv")
    assert os.path.exists(tmp_path / "final.txt")


def test_sweep_appends_one_row_per_worker_count(tmp_path, capsys):
    rc = generate_dataset.main(["--nodes", "8", "--workers-list", "1", "2", "4"] + base_args(tmp_path))
    assert rc == 0
    df = generate_dataset.load_perf_history(str(tmp_path / "perf.csv"))
    assert list(df["Workers"]) == [1, 2, 4]
    summary = generate_dataset.summarize(df)
    assert list(summary["Workers"]) == [1, 2, 4]
    assert "Wrote 3 runs" in capsys.readouterr().out
