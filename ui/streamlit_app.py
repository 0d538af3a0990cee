import streamlit as st
import subprocess
import sys
import os
import time

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
# Ensure the project root is on sys.path so imports like `from config import settings` work
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import settings, SimConfig
from simulation.aggregator import records_frame
from simulation.session_manager import SessionManager
from utils.report import load_perf_history

PERF_CSV = os.path.join(settings.DATA_DIR, settings.PERF_CSV_FILENAME)
SUMMARY_TXT = os.path.join(settings.DATA_DIR, settings.SUMMARY_FILENAME)


def run_script_stream(args: list, timeout: int = 3600, text_area_height: int = 300):
    """Run a Python script and stream stdout/stderr lines back to the UI.

    Returns (returncode, full_output, elapsed_seconds)
    """
    cmd = [sys.executable] + args
    start = time.time()
    try:
        proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, bufsize=1, text=True,
                                cwd=ROOT)
    except OSError as e:
        return -2, str(e), 0

    out_buf = []
    placeholder = st.empty()
    for line in proc.stdout:
        out_buf.append(line)
        placeholder.text_area("Process output (live)", ''.join(out_buf), height=text_area_height)
        if time.time() - start > timeout:
            proc.kill()
            return -1, ''.join(out_buf) + f"\nTimeout after {timeout}s\n", timeout
    rc = proc.wait()
    return rc, ''.join(out_buf), time.time() - start


def range_input(label: str, default, key: str):
    cols = st.columns(2)
    lo = cols[0].number_input(f"{label} min (ms)", min_value=0, value=int(default[0]), key=f"{key}_min")
    hi = cols[1].number_input(f"{label} max (ms)", min_value=0, value=int(default[1]), key=f"{key}_max")
    return int(lo), int(hi)


def show_run_result(result):
    stats = result.stats
    cols = st.columns(4)
    cols[0].metric("Avg node time", f"{stats.avg_us / 1000.0:.2f} ms")
    cols[1].metric("Median", f"{stats.median_us / 1000.0:.2f} ms")
    cols[2].metric("Success", f"{stats.success_pct:.2f} %")
    cols[3].metric("Dropped", f"{stats.drop_pct:.2f} %")
    st.write(f"Workers: {result.workers}  Wall time: {result.wall_time_s:.3f}s  "
             f"Min/Max: {stats.min_us / 1000.0:.2f} / {stats.max_us / 1000.0:.2f} ms")
    if stats.error_count:
        st.warning(f"{stats.error_count} node(s) failed with protocol errors")

    df = records_frame(result.records)
    st.subheader("Per-node results")
    if st.session_state.get('show_full_tables', False):
        st.dataframe(df)
    else:
        st.dataframe(df.head(200))
    completed = df[~df['dropped'].astype(bool)]
    if not completed.empty:
        st.subheader("Latency per node (ms)")
        st.line_chart((completed.set_index('node_index')['total_us'] / 1000.0).rename('latency_ms'))


def page_run_simulation():
    st.header("Run Simulation")
    d = SimConfig()
    nodes = st.number_input("Nodes", min_value=1, value=d.nodes)
    workers = st.number_input("Workers", min_value=1, value=d.workers)
    tamper = st.slider("Tamper percent", 0.0, 100.0, float(d.tamper_percent), 0.5)
    fail = st.slider("Drop percent", 0.0, 100.0, float(d.fail_percent), 0.5)
    payload = st.number_input("Payload bytes", min_value=0, value=d.payload_bytes)
    jitter = st.number_input("Node start jitter (ms)", min_value=0, value=d.node_jitter_ms)
    net_ta_node = range_input("TA -> Node", d.net_ta_node, "ta_node")
    net_node_mw = range_input("Node -> MW", d.net_node_mw, "node_mw")
    db_delay = range_input("DB", d.db_delay, "db")
    save_reports = st.checkbox("Append to performance CSV and summary", value=True)

    if st.button("Run"):
        cfg = SimConfig(nodes=int(nodes), workers=int(workers), tamper_percent=tamper, fail_percent=fail,
                        payload_bytes=int(payload), node_jitter_ms=int(jitter), net_ta_node=net_ta_node,
                        net_node_mw=net_node_mw, db_delay=db_delay, out_file=PERF_CSV, summary_file=SUMMARY_TXT)
        with st.spinner('Running simulation...'):
            result = SessionManager(cfg, write_reports=save_reports).run()
        show_run_result(result)


def page_worker_sweep():
    st.header("Worker Sweep")
    nodes = st.number_input("Nodes", min_value=1, value=200)
    workers_list = st.text_input("Worker counts (space separated)", value="1 2 4 8")
    fail = st.slider("Drop percent", 0.0, 100.0, 0.0, 0.5)
    tamper = st.slider("Tamper percent", 0.0, 100.0, 0.0, 0.5)

    if st.button("Run generate_dataset.py"):
        counts = workers_list.split()
        if not counts or not all(c.isdigit() and int(c) > 0 for c in counts):
            st.error("Worker counts must be positive integers")
            return
        args = [os.path.join(ROOT, 'generate_dataset.py'), '--nodes', str(nodes), '--workers-list', *counts,
                '--fail-percent', str(fail), '--tamper-percent', str(tamper), '--out', PERF_CSV,
                '--summary', SUMMARY_TXT]
        with st.spinner('Running sweep... this may take a while'):
            code, out, elapsed = run_script_stream(args, timeout=36000, text_area_height=300)
        st.subheader("Result")
        st.write(f"Return code: {code}  Elapsed: {elapsed:.1f}s")
        if out:
            st.text_area("Final output", out, height=200)


def page_reports():
    st.header("Reports")
    st.subheader("Performance history")
    df = load_perf_history(PERF_CSV)
    if df.empty:
        st.info(f"No performance CSV found at {PERF_CSV}")
    else:
        st.write(f"{len(df)} runs in {PERF_CSV}")
        st.dataframe(df)
        by_workers = df.groupby('Workers')[['Avg Total (us)', 'Median (us)']].mean()
        st.bar_chart(by_workers / 1000.0)

    st.subheader("Summary report")
    if os.path.exists(SUMMARY_TXT):
        with open(SUMMARY_TXT, 'r', encoding='utf-8', errors='ignore') as f:
            st.code(f.read())
    else:
        st.info(f"No summary found at {SUMMARY_TXT}")

    st.subheader("Log files")
    log_dir = settings.LOG_DIR
    files = sorted(os.listdir(log_dir)) if os.path.exists(log_dir) else []
    choice = st.selectbox("Select log file", ['-- none --'] + files, key='logs')
    if choice and choice != '-- none --':
        with open(os.path.join(log_dir, choice), 'r', encoding='utf-8', errors='ignore') as f:
            st.code(f.read())


def main():
    st.title("TA / Node / Middleware Handshake: Performance Simulator")
    st.sidebar.title("Navigation")
    show_full_tables = st.sidebar.checkbox("Show full per-node tables (may be large)", value=False)
    st.session_state['show_full_tables'] = show_full_tables
    page = st.sidebar.selectbox("Go to", ["Run Simulation", "Worker Sweep", "Reports"])

    if page == "Run Simulation":
        page_run_simulation()
    elif page == "Worker Sweep":
        page_worker_sweep()
    else:
        page_reports()


if __name__ == '__main__':
    main()
