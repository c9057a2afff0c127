"""
Central configuration for the bench runner.

Flat-constant interface.  Values that the HTTP layer can override per
deployment (timing, paths, log level) are mirrored by
``benchrun.api.config.ApiSettings``; everything else is read directly
from this module.

Config Status Legend
====================
  ACTIVE: imported and used by running code.

Search for ``# STATUS:`` to locate all annotations.
"""
from pathlib import Path
from typing import Dict

# ── Paths ──────────────────────────────────────────────────────────────
ROOT_DIR = Path(__file__).parent                  # STATUS: ACTIVE; base path for all relative references
RESULTS_DIR = ROOT_DIR.parent / "results"         # STATUS: ACTIVE; default folder for <product id>.txt result files
HISTORY_DB_PATH = str(ROOT_DIR.parent / "bench_runs.db")  # STATUS: ACTIVE; jobs/store.py run history

# ── Timing ─────────────────────────────────────────────────────────────
INCREMENT_SECONDS = 1.0                           # STATUS: ACTIVE; jobs/workload.py; one unit of simulated work
TIMER_INTERVAL_SECONDS = 1.0                      # STATUS: ACTIVE; jobs/progress.py; elapsed-time ticker period

# ── Test catalog ───────────────────────────────────────────────────────
# Nominal duration of each test in seconds, keyed by JobVariant value.
TEST_DURATIONS: Dict[str, int] = {                # STATUS: ACTIVE; jobs/catalog.py
    "test_1": 10,
    "test_2": 20,
    "test_3": 30,
}
DEFAULT_DURATION_SECONDS = 10                     # STATUS: ACTIVE; jobs/catalog.py fallback for unknown selectors
PAYLOAD_LABEL = "Test"                            # STATUS: ACTIVE; jobs/catalog.py; fixed string field of test_3 payloads

# ── Outcome ────────────────────────────────────────────────────────────
SUCCESS_PROBABILITY = 0.5                         # STATUS: ACTIVE; jobs/workload.py default success predicate
SIMULATED_FAILURE_MESSAGE = "A random error occurred."  # STATUS: ACTIVE; jobs/workload.py failed outcome message
RESULT_FILE_SUFFIX = ".txt"                       # STATUS: ACTIVE; jobs/sink.py
RESULT_ENCODING = "utf-8"                         # STATUS: ACTIVE; jobs/sink.py

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL = "INFO"                                # STATUS: ACTIVE; api/main.py, run_bench.py; "DEBUG", "INFO", "WARNING", "ERROR"
LOG_FORMAT = "structured"                         # STATUS: ACTIVE; api/main.py, run_bench.py; "structured" or "json"

# ── History ────────────────────────────────────────────────────────────
HISTORY_LIST_LIMIT = 50                           # STATUS: ACTIVE; api/routers/runs.py default page size


def validate_config() -> list:
    """Check config for common misconfigurations.

    Returns a list of dicts: [{"level": "WARNING"|"ERROR", "message": str}].
    Called on server startup and by ``run_bench.py``.
    """
    issues = []

    for variant, seconds in TEST_DURATIONS.items():
        if not isinstance(seconds, int) or seconds <= 0:
            issues.append({
                "level": "ERROR",
                "message": f"TEST_DURATIONS[{variant!r}]={seconds!r} must be a positive integer.",
            })

    if DEFAULT_DURATION_SECONDS <= 0:
        issues.append({
            "level": "ERROR",
            "message": f"DEFAULT_DURATION_SECONDS={DEFAULT_DURATION_SECONDS} must be positive.",
        })

    if INCREMENT_SECONDS < 0 or TIMER_INTERVAL_SECONDS <= 0:
        issues.append({
            "level": "ERROR",
            "message": (
                f"INCREMENT_SECONDS={INCREMENT_SECONDS} must be >= 0 and "
                f"TIMER_INTERVAL_SECONDS={TIMER_INTERVAL_SECONDS} must be > 0."
            ),
        })
    elif INCREMENT_SECONDS > 1.0:
        issues.append({
            "level": "WARNING",
            "message": (
                f"INCREMENT_SECONDS={INCREMENT_SECONDS} exceeds one second; "
                "cancellation latency will be longer than the reference bench."
            ),
        })

    if not 0.0 <= SUCCESS_PROBABILITY <= 1.0:
        issues.append({
            "level": "ERROR",
            "message": f"SUCCESS_PROBABILITY={SUCCESS_PROBABILITY} must be between 0.0 and 1.0.",
        })

    if not SIMULATED_FAILURE_MESSAGE:
        issues.append({
            "level": "ERROR",
            "message": "SIMULATED_FAILURE_MESSAGE is empty; failed outcomes require a message.",
        })

    if LOG_FORMAT not in ("structured", "json"):
        issues.append({
            "level": "WARNING",
            "message": f"LOG_FORMAT={LOG_FORMAT!r} is not 'structured' or 'json'; falling back to structured.",
        })

    return issues
